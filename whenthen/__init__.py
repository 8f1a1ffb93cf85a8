"""whenthen — Personal automation rules compiled to launchd agents.

A rule reads "when <trigger>, do <action>".  Each rule compiles into one or
two launchd job units plus the scripts they run, and the lifecycle manager
keeps those units registered, paused or removed.

Architecture layers (bottom to top):
    1. Domain    — trigger/action variants, typed configs, compatibility, Rule
    2. Compiler  — Rule → job units + script bodies + plist documents
    3. Lifecycle — file writing, launchctl registration, rule store
    4. Suggest   — free text → ranked candidate rules, template library
    5. CLI       — typer commands over all of the above
"""

__version__ = "0.1.0"
__author__ = "whenthen contributors"
__license__ = "Apache-2.0"

from whenthen.domain.rule import Rule

__all__ = [
    "__version__",
    "Rule",
]
