"""
spt defaults: conditional default values for absent flags.

A target flag that was not supplied takes the value of the first DefaultRule
(in declared order) whose predicate flag matches its expected presence; when
no rule matches, the flag's static default applies; when there is none, the
target stays Unset and the caller decides.

Rules are evaluated against the PresenceMap as parsed: a value back-filled for
one target never satisfies the predicate of another target's rule.
"""
from .logs import get_logger
from .utils import *

log = get_logger(__name__)


def resolve(target, presence, rules=None, /):
    """
    return the effective value of `target` (a FlagSpec).

    - present targets keep their supplied value (rules are not consulted).
    - otherwise the first matching rule wins, later matches are ignored.
    - otherwise target.default, which may itself be Unset.
    """
    if presence.present(target.name):
        return presence.value(target.name, Unset)

    rules = presence.spec.defaults.get(target.name, ()) if rules is None else rules
    for rule in rules:
        if presence.present(rule.flag) is rule.presence:
            log.debug("defaults.resolved", flag=target.name, rule=rule.flag, value=rule.value)
            return rule.value
    return target.default


def backfill(presence, /):
    """
    return a PresenceMap where every absent flag with a resolvable default
    (rule or static) carries that value, marked as defaulted.
    """
    filled = presence
    for flag in presence.spec.flags:
        if presence.present(flag.name):
            continue
        if (value := resolve(flag, presence)) is not Unset:
            filled = filled.fill(flag.name, value)
    return filled


def deferrable(spec, /):
    """
    names of the flags of `spec` that can be back-filled.
    """
    return frozenset(flag.name for flag in spec.flags if flag.name in spec.defaults or flag.default is not Unset)


__all__ = (
    "resolve",
    "backfill",
    "deferrable",
)
