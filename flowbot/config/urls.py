""" Urls of the modules define here... """

# Swagger API...
from ..config.swagger import api

# All Namespaces...
from ..flows.handler import flow_namespace
from ..bots.handler import bots_namespace





# Adding the namespaces
class URLs:
    """ All application namespaces will be declare here... """

    @staticmethod
    def add_namespaces():
        """ Function for adding namespaces, once per process... """

        for namespace in (flow_namespace, bots_namespace):
            if namespace not in api.namespaces:
                api.add_namespace(namespace)
