import sys

from twisted.python import log

from ldapconform import usage, config
from ldapconform.protocols.ldap import ldaperrors, ldifprotocol
from ldapconform.schema import subschema
from ldapconform.schema.validator import EntryValidator


def error(message):
    print(f"{sys.argv[0]}: {message}", file=sys.stderr)


def loadSchema(paths):
    """
    Load and merge the schemas in the given LDIF files, or the standard
    schema when there are none.
    """
    if not paths:
        return subschema.loadDefaultSchema()
    schemas = []
    for path in paths:
        schema = subschema.getSchema(path)
        if schema is None:
            log.msg("No subschema entry in %s" % (path,))
            continue
        schemas.append(schema)
    return subschema.mergeSchemas(*schemas)


def output(validator, path, entries, outputFile, quiet):
    for e in entries:
        valid, reasons = validator.entryIsValid(e)
        if valid:
            continue
        outputFile.write("%s: invalid entry %s\n" % (path, e.dn))
        if not quiet:
            for reason in reasons:
                outputFile.write("    %s\n" % reason)


def main(opts, outputFile=sys.stdout):
    """
    Validate the entries of every LDIF file named in opts.

    @return: the exit status, 1 if any entry is invalid or a file could
    not be read.
    """
    if opts['config'] is not None:
        cfg = config.loadConfig(configFiles=[opts['config']], reload=True)
    else:
        cfg = config.loadConfig()

    schemaFiles = opts['schema'] or config.getSchemaFiles(cfg)
    try:
        schema = loadSchema(schemaFiles)
    except (OSError,
            ldifprotocol.LDIFParseError,
            ldaperrors.LDAPException) as e:
        error("cannot load schema: %s" % (e,))
        return 1
    if schema is None:
        error("no subschema entry found in %s" % " ".join(schemaFiles))
        return 1

    try:
        validator = EntryValidator.fromConfig(schema, cfg)
    except ValueError as e:
        error("bad configuration: %s" % (e,))
        return 1
    for flag, enabled in opts['ignored-checks'].items():
        setattr(validator, flag, enabled)

    exitStatus = 0
    for path in opts['files']:
        try:
            entries = ldifprotocol.fromLDIFPath(path)
        except (OSError, ldifprotocol.LDIFParseError) as e:
            error("cannot read %s: %s" % (path, e))
            exitStatus = 1
            continue
        output(validator, path, entries, outputFile, opts['quiet'])

    for line in validator.getInvalidEntrySummary(opts['detailed']):
        outputFile.write(line + "\n")
    if validator.getInvalidEntries():
        exitStatus = 1
    return exitStatus


class MyOptions(
    usage.Options, usage.Options_config, usage.Options_schema,
    usage.Options_validation
):
    """ldapconform LDIF schema conformance checker"""

    optFlags = (
        ('quiet', 'q', "only print the DNs of invalid entries"),
        ('detailed', 'd', "list every class and attribute in the summary"),
        ('verbose', 'v', "log to standard error"),
    )

    def parseArgs(self, *files):
        if not files:
            raise usage.UsageError("no LDIF files given")
        self.opts['files'] = files


def console_script():
    try:
        opts = MyOptions()
        opts.parseOptions()
    except usage.UsageError as ue:
        sys.stderr.write(f"{sys.argv[0]}: {ue}\n")
        sys.exit(1)

    if opts['verbose']:
        log.startLogging(sys.stderr, setStdout=0)

    sys.exit(main(opts))


if __name__ == "__main__":
    sys.exit(console_script())
