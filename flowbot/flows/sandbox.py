"""
Code Node Runtime

Everything here runs INSIDE the short-lived sandbox process started by
CodeSandboxService. The parent never executes user code itself.

A script is Python compiled with RestrictedPython and sees only these globals:

    variables                 mutable copy of the session variables
    get_variable(name, default=None)
    set_variable(name, value)
    http                      outbound HTTP: get/post/put/patch/delete
    sleep(seconds)
    json, math, datetime      restricted wrappers
    log(*args)                goes to the application log
    result                    assign to publish the node's result

Whatever the script leaves in ``result`` and ``variables`` is sent back to the
parent as JSON-safe data.
"""

# Python Packages
import json
import math
import time
import operator
from types import SimpleNamespace
from datetime import datetime, timedelta, timezone

import requests
import structlog
from RestrictedPython import compile_restricted_exec, safe_builtins, limited_builtins
from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    guarded_unpack_sequence,
    safer_getattr,
)
from RestrictedPython.PrintCollector import PrintCollector

# Logging
from ..util.logger import configure_logging

logger = structlog.get_logger(__name__)


# Pipe message kinds
READY = "ready"
DONE = "done"

SCRIPT_FILENAME = "<code_node>"

EXTRA_BUILTINS = {
    "dict": dict,
    "set": set,
    "frozenset": frozenset,
    "enumerate": enumerate,
    "reversed": reversed,
    "sum": sum,
    "min": min,
    "max": max,
    "any": any,
    "all": all,
    "map": map,
    "filter": filter,
}

MATH_NAMES = (
    "ceil", "floor", "sqrt", "pow", "log", "log10", "exp", "fabs",
    "isclose", "isfinite", "isnan", "pi", "e", "inf",
)

INPLACE_OPERATORS = {
    "+=": operator.iadd,
    "-=": operator.isub,
    "*=": operator.imul,
    "/=": operator.itruediv,
    "//=": operator.ifloordiv,
    "%=": operator.imod,
    "**=": operator.ipow,
    "<<=": operator.ilshift,
    ">>=": operator.irshift,
    "&=": operator.iand,
    "^=": operator.ixor,
    "|=": operator.ior,
}





class VariableScope:
    """ The script's private copy of the session variables... """

    def __init__(self, variables: dict):
        self.variables = dict(variables or {})

    def get(self, name, default = None):
        return self.variables.get(name, default)

    def set(self, name, value):
        self.variables[name] = value



class SandboxHttpClient:
    """
    The only network access a script gets.

    Responses come back as plain dicts so no library objects leak into the
    script: {"status", "ok", "headers", "text", "json"}.
    """

    ALLOWED_OPTIONS = ("params", "json", "data", "headers")

    def __init__(self, timeout: float):
        self.timeout = timeout

    def get(self, url, **options):
        return self._request("GET", url, options)

    def post(self, url, **options):
        return self._request("POST", url, options)

    def put(self, url, **options):
        return self._request("PUT", url, options)

    def patch(self, url, **options):
        return self._request("PATCH", url, options)

    def delete(self, url, **options):
        return self._request("DELETE", url, options)

    def _request(self, method, url, options):
        unknown = set(options) - set(self.ALLOWED_OPTIONS)
        if unknown:
            raise ValueError(f"Unsupported http option(s): {', '.join(sorted(unknown))}")

        response = requests.request(
            method, str(url), timeout = self.timeout, allow_redirects = False, **options
        )

        try:
            body = response.json()
        except ValueError:
            body = None

        return {
            "status": response.status_code,
            "ok": response.ok,
            "headers": dict(response.headers),
            "text": response.text,
            "json": body,
        }



def _inplacevar(op, target, value):
    return INPLACE_OPERATORS[op](target, value)


def _log(*args):
    logger.info("Code node log", output = " ".join(str(arg) for arg in args))


def build_globals(scope: VariableScope, http_timeout: float) -> dict:
    """ Allow-listed globals for one script run... """

    builtins = dict(safe_builtins)
    builtins.update(limited_builtins)
    builtins.update(EXTRA_BUILTINS)

    return {
        "__builtins__": builtins,
        "__name__": "code_node",
        "__metaclass__": type,

        # RestrictedPython guards
        "_getattr_": safer_getattr,
        "_getitem_": default_guarded_getitem,
        "_getiter_": default_guarded_getiter,
        "_iter_unpack_sequence_": guarded_iter_unpack_sequence,
        "_unpack_sequence_": guarded_unpack_sequence,
        "_write_": full_write_guard,
        "_inplacevar_": _inplacevar,
        "_print_": PrintCollector,

        # Session state
        "variables": scope.variables,
        "get_variable": scope.get,
        "set_variable": scope.set,
        "result": None,

        # Utilities
        "http": SandboxHttpClient(http_timeout),
        "sleep": time.sleep,
        "log": _log,
        "json": SimpleNamespace(loads = json.loads, dumps = json.dumps),
        "math": SimpleNamespace(**{name: getattr(math, name) for name in MATH_NAMES}),
        "datetime": SimpleNamespace(
            now = lambda: datetime.now(timezone.utc),
            today = lambda: datetime.now(timezone.utc).date(),
            fromisoformat = datetime.fromisoformat,
            timedelta = timedelta,
        ),
    }


def execute_script(source: str, variables: dict, http_timeout: float) -> dict:
    """
    Compile and run *source*; never raises.

    Returns:
        {"success": bool, "result": any, "error": str | None, "variables": dict}
    """

    compiled = compile_restricted_exec(source, filename = SCRIPT_FILENAME)
    if compiled.errors:
        return {"success": False, "result": None, "error": "; ".join(compiled.errors), "variables": {}}

    scope = VariableScope(variables)
    script_globals = build_globals(scope, http_timeout)

    try:
        exec(compiled.code, script_globals)
    except Exception as error:
        return {
            "success": False,
            "result": None,
            "error": str(error) or error.__class__.__name__,
            "variables": {},
        }

    payload = {
        "success": True,
        "result": script_globals.get("result"),
        "error": None,
        "variables": scope.variables,
    }

    try:
        return json.loads(json.dumps(payload, default = str))
    except (TypeError, ValueError) as error:
        return {
            "success": False,
            "result": None,
            "error": f"Code node produced non-serializable data: {error}",
            "variables": {},
        }


def run_script(source: str, variables: dict, http_timeout: float, conn):
    """ Process entry point: handshake, run, report, exit... """

    configure_logging()

    try:
        conn.send((READY, None))
        conn.send((DONE, execute_script(source, variables, http_timeout)))
    finally:
        conn.close()
