import configparser
import os.path


# option name in the [validation] section, EntryValidator flag
VALIDATION_CHECKS = (
    ('check-attribute-syntax', 'checkAttributeSyntax'),
    ('check-malformed-dns', 'checkMalformedDNs'),
    ('check-missing-attributes', 'checkMissingAttributes'),
    ('check-missing-superior-object-classes',
     'checkMissingSuperiorObjectClasses'),
    ('check-name-forms', 'checkNameForms'),
    ('check-prohibited-attributes', 'checkProhibitedAttributes'),
    ('check-prohibited-object-classes', 'checkProhibitedObjectClasses'),
    ('check-single-valued-attributes', 'checkSingleValuedAttributes'),
    ('check-structural-object-classes', 'checkStructuralObjectClasses'),
    ('check-undefined-attributes', 'checkUndefinedAttributes'),
    ('check-undefined-object-classes', 'checkUndefinedObjectClasses'),
)

DEFAULTS = {
    'validation': {option: 'yes' for option, _ in VALIDATION_CHECKS},
    'schema': {'files': '',
               },
}

CONFIG_FILES = [
    '/etc/ldapconform/global.cfg',
    os.path.expanduser('~/.ldapconform/global.cfg'),
]

__config = None


def loadConfig(configFiles=None,
               reload=False):
    """
    Load configuration file.
    """
    global __config
    if __config is None or reload:
        x = configparser.ConfigParser()

        for section, options in DEFAULTS.items():
            x.add_section(section)
            for option, value in options.items():
                x.set(section, option, value)

        if configFiles is None:
            configFiles = CONFIG_FILES
        x.read(configFiles)
        __config = x
    return __config


def getValidationChecks(cfg=None):
    """
    Read configuration file if necessary and return a dictionary
    mapping each EntryValidator check flag to whether it is enabled.

    @raise ValueError: if an option is not a boolean.
    """
    if cfg is None:
        cfg = loadConfig()
    r = {}
    for option, flag in VALIDATION_CHECKS:
        try:
            r[flag] = cfg.getboolean('validation', option)
        except (configparser.NoOptionError,
                configparser.NoSectionError):
            r[flag] = True
    return r


def getSchemaFiles(cfg=None):
    """
    Read configuration file if necessary and return the list of LDIF
    files to load the schema from. An empty list means the standard
    schema.
    """
    if cfg is None:
        cfg = loadConfig()
    try:
        files = cfg.get('schema', 'files')
    except (configparser.NoOptionError,
            configparser.NoSectionError):
        return []
    return files.split()
