"""
Command line argument/options available to various ldapconform tools.
"""
import os.path

from twisted.python import usage, reflect
from twisted.python.usage import UsageError

from ldapconform import config

__all__ = [
    "Options",
    "Options_config",
    "Options_schema",
    "Options_validation",
    "UsageError",
]


class Options(usage.Options):
    optParameters = ()

    def postOptions(self):
        postOpt = {}
        reflect.addMethodNamesToDict(self.__class__, postOpt, "postOptions_")
        for name in postOpt.keys():
            method = getattr(self, 'postOptions_' + name)
            method()


class Options_config:
    optParameters = (
        ('config', None, None,
         "read configuration from this file instead of the global ones"),
    )

    def postOptions_config(self):
        path = self.opts['config']
        if path is not None and not os.path.isfile(path):
            raise usage.UsageError("config file not found: %s" % (path,))


class Options_schema:
    """
    Mixin for providing the --schema option.
    """

    def opt_schema(self, value):
        """LDIF file holding a subschema entry, may be given many times"""
        if 'schema' not in self.opts:
            self.opts['schema'] = []
        if not os.path.isfile(value):
            raise usage.UsageError("schema file not found: %s" % (value,))
        self.opts['schema'].append(value)

    def postOptions_schema(self):
        if 'schema' not in self.opts:
            self.opts['schema'] = []


def _checkOption(option):
    return 'ignore-' + option[len('check-'):]


class Options_validation:
    """
    Mixin providing one --ignore-* flag per entry validator check.
    """

    optFlags = tuple(
        (_checkOption(option), None,
         "do not check %s" % option[len('check-'):].replace('-', ' '))
        for option, _ in config.VALIDATION_CHECKS)

    def postOptions_validation(self):
        ignored = {}
        for option, flag in config.VALIDATION_CHECKS:
            if self.opts[_checkOption(option)]:
                ignored[flag] = False
        self.opts['ignored-checks'] = ignored
