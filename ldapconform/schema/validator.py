"""
Check directory entries against a schema.
"""

import threading

from twisted.python import log

from ldapconform import config
from ldapconform._encoder import to_unicode_lenient
from ldapconform.matchingrules.registry import standardMatchingRules
from ldapconform.protocols.ldap import ldaperrors
from ldapconform.schema.objectclasses import ABSTRACT, AUXILIARY, STRUCTURAL


class _Counter:
    """An integer that many threads may increment at once."""

    def __init__(self):
        self._lock = threading.Lock()
        self._value = 0

    def increment(self):
        with self._lock:
            self._value += 1
            return self._value

    def get(self):
        with self._lock:
            return self._value

    def reset(self):
        with self._lock:
            self._value = 0


class _Tally:
    """Counters keyed by lower-cased name."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counts = {}

    def increment(self, name):
        key = name.lower()
        with self._lock:
            self._counts[key] = self._counts.get(key, 0) + 1

    def total(self):
        with self._lock:
            return sum(self._counts.values())

    def getCounts(self):
        """A sorted copy of the counts."""
        with self._lock:
            return dict(sorted(self._counts.items()))

    def reset(self):
        with self._lock:
            self._counts.clear()


def _percent(count, total):
    return 100 * count // total


class EntryValidator:
    """
    Decide whether entries conform to a schema, and explain why not.

    Every check can be switched off by setting its C{check*} attribute
    to False. Set them before validating; a validator may then be
    shared by several threads, the counters it keeps across calls are
    safe to update concurrently.
    """

    checkAttributeSyntax = True
    checkMalformedDNs = True
    checkMissingAttributes = True
    checkMissingSuperiorObjectClasses = True
    checkNameForms = True
    checkProhibitedAttributes = True
    checkProhibitedObjectClasses = True
    checkSingleValuedAttributes = True
    checkStructuralObjectClasses = True
    checkUndefinedAttributes = True
    checkUndefinedObjectClasses = True

    def __init__(self, schema, matchingRules=None):
        """
        @param schema: the Schema to check entries against.

        @param matchingRules: the MatchingRuleRegistry used to check
        attribute values; the built-in rules when None.
        """
        if schema is None:
            raise ldaperrors.LDAPParamError("EntryValidator needs a schema")
        self.schema = schema
        if matchingRules is None:
            matchingRules = standardMatchingRules()
        self.matchingRules = matchingRules

        self._entriesExamined = _Counter()
        self._invalidEntries = _Counter()
        self._malformedDNs = _Counter()
        self._missingSuperiorClasses = _Counter()
        self._multipleStructuralClasses = _Counter()
        self._nameFormViolations = _Counter()
        self._noObjectClasses = _Counter()
        self._noStructuralClass = _Counter()

        self._attributesViolatingSyntax = _Tally()
        self._missingAttributes = _Tally()
        self._prohibitedAttributes = _Tally()
        self._prohibitedObjectClasses = _Tally()
        self._singleValueViolations = _Tally()
        self._undefinedAttributes = _Tally()
        self._undefinedObjectClasses = _Tally()

    @classmethod
    def fromConfig(cls, schema, cfg=None, matchingRules=None):
        """
        A validator with its checks switched on or off as the
        [validation] section of the configuration says.
        """
        validator = cls(schema, matchingRules=matchingRules)
        for flag, enabled in config.getValidationChecks(cfg).items():
            setattr(validator, flag, enabled)
        return validator

    def entryIsValid(self, entry):
        """
        Check an entry against the schema.

        Nothing about the entry stops the checks early: every problem
        found is reported, and counted.

        @param entry: the entry to check.
        @type entry: L{ILDAPEntry}

        @return: a tuple of whether the entry is valid and the list of
        reasons it is not, as text.

        @raise LDAPParamError: if entry is None.
        """
        if entry is None:
            raise ldaperrors.LDAPParamError("No entry to validate")

        reasons = []
        valid = True
        self._entriesExamined.increment()

        rdn = None
        try:
            rdn = entry.getParsedDN().getRDN()
        except ldaperrors.LDAPInvalidDNSyntax as e:
            log.msg("Cannot parse DN %r: %s" % (entry.dn, e), debug=True)
            if self.checkMalformedDNs:
                valid = False
                self._malformedDNs.increment()
                reasons.append("The DN %r is malformed: %s" % (entry.dn, e))

        objectClasses = []
        structuralClass = None
        ditContentRule = None
        nameForm = None
        objectClassValues = entry.getObjectClassValues()
        if not objectClassValues:
            valid = False
            self._noObjectClasses.increment()
            reasons.append("The entry does not have any object classes")
        else:
            if not self._getObjectClasses(objectClassValues, objectClasses,
                                          reasons):
                valid = False
            structuralClass, found = self._getStructuralClass(
                objectClasses, reasons)
            if not found:
                valid = False
            if structuralClass is not None:
                ditContentRule = self.schema.getDITContentRule(
                    structuralClass.oid)
                nameForm = self.schema.getNameFormByObjectClass(
                    structuralClass)

        required = self._getRequiredAttributes(objectClasses, ditContentRule)
        optional = self._getOptionalAttributes(
            objectClasses, ditContentRule, required)

        if self.checkMissingAttributes:
            if not self._checkMissingAttributes(entry, rdn, required, reasons):
                valid = False

        for attribute in entry.getAttributes():
            if not self._checkAttribute(attribute, required, optional,
                                        reasons):
                valid = False

        if self.checkProhibitedObjectClasses and ditContentRule is not None:
            if not self._checkAuxiliaryClasses(objectClasses, ditContentRule,
                                               reasons):
                valid = False

        if rdn is not None:
            if not self._checkRDN(rdn, required, optional, nameForm, reasons):
                valid = False

        if not valid:
            self._invalidEntries.increment()
        return valid, reasons

    def assertEntryIsValid(self, entry):
        """
        Like L{entryIsValid}, but raise instead of returning a verdict.

        @raise LDAPObjectClassViolation: if the entry is not valid, with
        the reasons joined into the message.
        """
        valid, reasons = self.entryIsValid(entry)
        if not valid:
            raise ldaperrors.LDAPObjectClassViolation(
                "%s: %s" % (entry.dn, "; ".join(reasons)))

    def _getObjectClasses(self, names, objectClasses, reasons):
        valid = True
        undefined = set()
        for name in names:
            oc = self.schema.getObjectClass(name)
            if oc is None:
                if self.checkUndefinedObjectClasses:
                    valid = False
                    undefined.add(name.lower())
                    self._undefinedObjectClasses.increment(name)
                    reasons.append(
                        "Object class %s is not defined in the schema"
                        % name)
            elif oc not in objectClasses:
                objectClasses.append(oc)

        missingSuperior = False
        walked = set()
        pending = list(objectClasses)
        while pending:
            oc = pending.pop(0)
            if oc in walked:
                continue
            walked.add(oc)
            for name in oc.sup:
                superior = self.schema.getObjectClass(name)
                if superior is None:
                    if (self.checkUndefinedObjectClasses
                            and name.lower() not in undefined):
                        valid = False
                        undefined.add(name.lower())
                        self._undefinedObjectClasses.increment(name)
                        reasons.append(
                            "Object class %s names superior class %s, which "
                            "is not defined in the schema"
                            % (oc.getNameOrOID(), name))
                    continue
                if superior not in objectClasses:
                    # still counts as present for the other checks
                    objectClasses.append(superior)
                    if self.checkMissingSuperiorObjectClasses:
                        valid = False
                        missingSuperior = True
                        reasons.append(
                            "Object class %s is missing, it is a superior "
                            "class of %s"
                            % (superior.getNameOrOID(), oc.getNameOrOID()))
                pending.append(superior)

        if missingSuperior:
            self._missingSuperiorClasses.increment()
        return valid

    def _getStructuralClass(self, objectClasses, reasons):
        """
        Find the one structural class of an entry.

        @return: a tuple of the structural class, or None, and whether
        the checks passed.
        """
        candidates = list(objectClasses)
        for oc in objectClasses:
            kind = self.schema.getObjectClassType(oc)
            if kind == STRUCTURAL:
                superiors = oc.getSuperiorClasses(self.schema, recursive=True)
                candidates = [x for x in candidates if x not in superiors]
            elif kind == AUXILIARY:
                superiors = oc.getSuperiorClasses(self.schema, recursive=True)
                candidates = [x for x in candidates
                              if x != oc and x not in superiors]

        valid = True
        remaining = []
        for oc in candidates:
            if self.schema.getObjectClassType(oc) == ABSTRACT:
                if self.checkProhibitedObjectClasses:
                    valid = False
                    self._prohibitedObjectClasses.increment(oc.getNameOrOID())
                    reasons.append(
                        "Abstract object class %s is not allowed without a "
                        "structural or auxiliary class inheriting from it"
                        % oc.getNameOrOID())
            else:
                remaining.append(oc)

        if len(remaining) == 1:
            return remaining[0], valid

        if self.checkStructuralObjectClasses:
            valid = False
            if not remaining:
                self._noStructuralClass.increment()
                reasons.append("The entry does not have a structural "
                               "object class")
            else:
                self._multipleStructuralClasses.increment()
                reasons.append(
                    "The entry has multiple structural object classes: %s"
                    % ", ".join(x.getNameOrOID() for x in remaining))
        return None, valid

    def _getRequiredAttributes(self, objectClasses, ditContentRule):
        required = []
        for oc in objectClasses:
            for attributeType in oc.getRequiredAttributes(self.schema):
                if attributeType not in required:
                    required.append(attributeType)
        if ditContentRule is not None:
            for attributeType in ditContentRule.getRequiredAttributes(
                    self.schema):
                if attributeType not in required:
                    required.append(attributeType)
        return required

    def _getOptionalAttributes(self, objectClasses, ditContentRule, required):
        optional = []
        for oc in objectClasses:
            if oc.isExtensibleObject():
                optional = [x for x in self.schema.getUserAttributeTypes()
                            if x not in required]
                break
            for attributeType in oc.getOptionalAttributes(self.schema):
                if attributeType not in required and attributeType not in optional:
                    optional.append(attributeType)

        if ditContentRule is not None:
            for attributeType in ditContentRule.getOptionalAttributes(
                    self.schema):
                if attributeType not in required and attributeType not in optional:
                    optional.append(attributeType)
            prohibited = ditContentRule.getProhibitedAttributes(self.schema)
            optional = [x for x in optional if x not in prohibited]
        return optional

    def _checkMissingAttributes(self, entry, rdn, required, reasons):
        present = set()
        for attribute in entry.getAttributes():
            present.add(attribute.getBaseName().lower())
        if rdn is not None:
            for name in rdn.getAttributeNames():
                present.add(name.lower())

        valid = True
        for attributeType in required:
            if present.isdisjoint(attributeType.getNamesAndOID()):
                valid = False
                self._missingAttributes.increment(
                    attributeType.getNameOrOID())
                reasons.append("Required attribute %s is missing"
                               % attributeType.getNameOrOID())
        return valid

    def _checkAttribute(self, attribute, required, optional, reasons):
        name = attribute.getBaseName()
        attributeType = self.schema.getAttributeType(name)
        if attributeType is None:
            if self.checkUndefinedAttributes:
                self._undefinedAttributes.increment(name)
                reasons.append("Attribute %s is not defined in the schema"
                               % name)
                return False
            return True

        valid = True
        typeName = attributeType.getNameOrOID()
        if (self.checkProhibitedAttributes
                and not attributeType.isOperational()
                and attributeType not in required
                and attributeType not in optional):
            valid = False
            self._prohibitedAttributes.increment(typeName)
            reasons.append("Attribute %s is not allowed by the object "
                           "classes of the entry" % typeName)

        if (self.checkSingleValuedAttributes
                and attributeType.single_value
                and len(attribute) > 1):
            valid = False
            self._singleValueViolations.increment(typeName)
            reasons.append("Attribute %s is single-valued but has %d values"
                           % (typeName, len(attribute)))

        if self.checkAttributeSyntax:
            rule = self.matchingRules.selectEqualityMatchingRule(
                typeName, self.schema)
            for value in sorted(attribute):
                try:
                    rule.normalize(value)
                except ldaperrors.LDAPException as e:
                    valid = False
                    self._attributesViolatingSyntax.increment(typeName)
                    reasons.append(
                        "Value %r of attribute %s violates its syntax: %s"
                        % (to_unicode_lenient(value), typeName, e.message))
        return valid

    def _checkAuxiliaryClasses(self, objectClasses, ditContentRule, reasons):
        allowed = ditContentRule.getAuxiliaryClasses(self.schema)
        valid = True
        for oc in objectClasses:
            if (self.schema.getObjectClassType(oc) == AUXILIARY
                    and oc not in allowed):
                valid = False
                self._prohibitedObjectClasses.increment(oc.getNameOrOID())
                reasons.append(
                    "Auxiliary object class %s is not allowed by DIT "
                    "content rule %s"
                    % (oc.getNameOrOID(), ditContentRule.getNameOrOID()))
        return valid

    def _checkRDN(self, rdn, required, optional, nameForm, reasons):
        nameFormRequired = []
        nameFormAllowed = []
        if nameForm is not None:
            nameFormRequired = nameForm.getRequiredAttributes(self.schema)
            nameFormAllowed = (nameFormRequired
                               + nameForm.getOptionalAttributes(self.schema))

        valid = True
        nameFormViolation = False
        seen = []
        for name in rdn.getAttributeNames():
            attributeType = self.schema.getAttributeType(name)
            if attributeType is None:
                if self.checkUndefinedAttributes:
                    valid = False
                    self._undefinedAttributes.increment(name)
                    reasons.append("RDN attribute %s is not defined in the "
                                   "schema" % name)
                continue

            seen.append(attributeType)
            typeName = attributeType.getNameOrOID()
            if (self.checkProhibitedAttributes
                    and not attributeType.isOperational()
                    and attributeType not in required
                    and attributeType not in optional):
                valid = False
                self._prohibitedAttributes.increment(typeName)
                reasons.append("RDN attribute %s is not allowed by the "
                               "object classes of the entry" % typeName)

            if (self.checkNameForms and nameForm is not None
                    and attributeType not in nameFormAllowed):
                nameFormViolation = True
                reasons.append("RDN attribute %s is not allowed by name "
                               "form %s" % (name, nameForm.getNameOrOID()))

        if self.checkNameForms:
            for attributeType in nameFormRequired:
                if attributeType not in seen:
                    nameFormViolation = True
                    reasons.append(
                        "RDN is missing attribute %s required by name form %s"
                        % (attributeType.getNameOrOID(),
                           nameForm.getNameOrOID()))

        if nameFormViolation:
            valid = False
            self._nameFormViolations.increment()
        return valid

    def resetCounts(self):
        """Set every counter and tally back to zero."""
        for counter in (self._entriesExamined,
                        self._invalidEntries,
                        self._malformedDNs,
                        self._missingSuperiorClasses,
                        self._multipleStructuralClasses,
                        self._nameFormViolations,
                        self._noObjectClasses,
                        self._noStructuralClass,
                        self._attributesViolatingSyntax,
                        self._missingAttributes,
                        self._prohibitedAttributes,
                        self._prohibitedObjectClasses,
                        self._singleValueViolations,
                        self._undefinedAttributes,
                        self._undefinedObjectClasses):
            counter.reset()

    def getEntriesExamined(self):
        return self._entriesExamined.get()

    def getInvalidEntries(self):
        return self._invalidEntries.get()

    def getMalformedDNs(self):
        return self._malformedDNs.get()

    def getEntriesWithoutAnyObjectClasses(self):
        return self._noObjectClasses.get()

    def getEntriesMissingStructuralObjectClass(self):
        return self._noStructuralClass.get()

    def getEntriesWithMultipleStructuralObjectClasses(self):
        return self._multipleStructuralClasses.get()

    def getEntriesWithMissingSuperiorObjectClasses(self):
        return self._missingSuperiorClasses.get()

    def getNameFormViolations(self):
        """Number of entries whose RDN breaks their name form."""
        return self._nameFormViolations.get()

    def getTotalUndefinedObjectClasses(self):
        return self._undefinedObjectClasses.total()

    def getUndefinedObjectClasses(self):
        return self._undefinedObjectClasses.getCounts()

    def getTotalProhibitedObjectClasses(self):
        return self._prohibitedObjectClasses.total()

    def getProhibitedObjectClasses(self):
        return self._prohibitedObjectClasses.getCounts()

    def getTotalUndefinedAttributes(self):
        return self._undefinedAttributes.total()

    def getUndefinedAttributes(self):
        return self._undefinedAttributes.getCounts()

    def getTotalMissingAttributes(self):
        return self._missingAttributes.total()

    def getMissingAttributes(self):
        return self._missingAttributes.getCounts()

    def getTotalProhibitedAttributes(self):
        return self._prohibitedAttributes.total()

    def getProhibitedAttributes(self):
        return self._prohibitedAttributes.getCounts()

    def getTotalSingleValueViolations(self):
        return self._singleValueViolations.total()

    def getSingleValueViolations(self):
        return self._singleValueViolations.getCounts()

    def getTotalAttributesViolatingSyntax(self):
        return self._attributesViolatingSyntax.total()

    def getAttributesViolatingSyntax(self):
        return self._attributesViolatingSyntax.getCounts()

    def getInvalidEntrySummary(self, detailedResults=False):
        """
        Describe the problems found so far, one line per kind of
        problem. Entry counts come with their share of the entries
        examined, in whole percent.

        @param detailedResults: also list every object class or
        attribute involved, with its count.

        @return: list of lines; empty when every entry was valid.
        """
        invalid = self.getInvalidEntries()
        if invalid == 0:
            return []

        examined = self.getEntriesExamined()
        lines = ["%d of %d entries (%d%%) were invalid"
                 % (invalid, examined, _percent(invalid, examined))]

        for count, description in (
                (self.getMalformedDNs(),
                 "had malformed DNs"),
                (self.getEntriesWithoutAnyObjectClasses(),
                 "had no object classes"),
                (self.getEntriesMissingStructuralObjectClass(),
                 "had no structural object class"),
                (self.getEntriesWithMultipleStructuralObjectClasses(),
                 "had multiple structural object classes"),
                (self.getNameFormViolations(),
                 "had RDNs violating their name form")):
            if count > 0:
                lines.append("%d of %d entries (%d%%) %s"
                             % (count, examined, _percent(count, examined),
                                description))

        def addTally(tally, description):
            total = tally.total()
            if total > 0:
                lines.append("%d %s" % (total, description))
                if detailedResults:
                    for name, count in tally.getCounts().items():
                        lines.append("    %s: %d" % (name, count))

        addTally(self._undefinedObjectClasses,
                 "undefined object class references")
        addTally(self._prohibitedObjectClasses,
                 "prohibited object class references")

        missingSuperior = self.getEntriesWithMissingSuperiorObjectClasses()
        if missingSuperior > 0:
            lines.append("%d entries were missing superior object classes"
                         % missingSuperior)

        addTally(self._undefinedAttributes,
                 "undefined attribute references")
        addTally(self._missingAttributes,
                 "missing required attributes")
        addTally(self._prohibitedAttributes,
                 "prohibited attribute references")
        addTally(self._singleValueViolations,
                 "single-valued attributes with multiple values")
        addTally(self._attributesViolatingSyntax,
                 "attribute values violating their syntax")
        return lines

    def __repr__(self):
        return "<%s schema=%r examined=%d invalid=%d>" % (
            self.__class__.__name__,
            self.schema,
            self.getEntriesExamined(),
            self.getInvalidEntries())
