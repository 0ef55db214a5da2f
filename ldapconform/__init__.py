"""LDAP schema model and entry conformance checking for Twisted"""
__version__ = "1.0.0"

__title__ = "ldapconform"
__description__ = "LDAP schema model and entry conformance checking for Twisted"

__license__ = "MIT"
__author__ = "The ldapconform developers"
__copyright__ = "Copyright (c) 2024-2026 {}".format(__author__)
