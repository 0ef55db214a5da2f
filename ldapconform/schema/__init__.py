"""
Directory schema definitions, the schema they form, and checking
entries against it.
"""

from ldapconform.schema.attributes import (
    AttributeSyntaxDefinition, AttributeTypeDefinition)
from ldapconform.schema.element import SchemaCycleError
from ldapconform.schema.matching import (
    MatchingRuleDefinition, MatchingRuleUseDefinition)
from ldapconform.schema.objectclasses import ObjectClassDefinition
from ldapconform.schema.rules import (
    DITContentRuleDefinition, DITStructureRuleDefinition, NameFormDefinition)
from ldapconform.schema.subschema import (
    Schema, getSchema, loadDefaultSchema, mergeSchemas)

__all__ = [
    "AttributeSyntaxDefinition",
    "AttributeTypeDefinition",
    "DITContentRuleDefinition",
    "DITStructureRuleDefinition",
    "MatchingRuleDefinition",
    "MatchingRuleUseDefinition",
    "NameFormDefinition",
    "ObjectClassDefinition",
    "Schema",
    "SchemaCycleError",
    "getSchema",
    "loadDefaultSchema",
    "mergeSchemas",
]
