"""Protocol-level helpers: distinguished names, LDIF input and result codes."""
