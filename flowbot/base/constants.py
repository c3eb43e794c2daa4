""" All Application Constants declare here... """

# Python Packages
from decouple import config


# App Constants
APP_ENV                         =   config('APP_ENV', default = 'development')
APP_SECRET_KEY                  =   config('APP_SECRET_KEY', default = 'change-me')
LOG_LEVEL                       =   config('LOG_LEVEL', default = 'INFO')


# Swagger Constants
SWAGGER_APP_PROPS       =   {
                                "name": "FlowBot",
                                "version": "1.0",
                                "description": "Multi-tenant chatbot platform: bots run \
                                authored conversation flows with questions, \
                                branches and sandboxed code nodes."
                            }


# Database Constants
DB_HOST                         =   config('DB_HOST', default = 'localhost')
DB_PORT                         =   config('DB_PORT', default = '5432')
DB_NAME                         =   config('DB_NAME', default = 'flowbot')
DB_USER                         =   config('DB_USER', default = 'postgres')
DB_PASSWORD                     =   config('DB_PASSWORD', default = 'postgres')

# Full URI, wins over the DB_* parts when set
DATABASE_URL                    =   config('DATABASE_URL', default = '')


# Code Sandbox Constants
SANDBOX_START_METHOD            =   config('SANDBOX_START_METHOD', default = 'spawn')
SANDBOX_STARTUP_TIMEOUT_SECONDS =   config('SANDBOX_STARTUP_TIMEOUT_SECONDS', default = 10.0, cast = float)
SANDBOX_HTTP_TIMEOUT_SECONDS    =   config('SANDBOX_HTTP_TIMEOUT_SECONDS', default = 10.0, cast = float)
