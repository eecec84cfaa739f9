"""
spt constraints: the group model validated over a PresenceMap.

Rules (per group, in declaration order; the first violation is raised)
- AT_MOST_ONE with more than one present member → MutuallyExclusiveError
- ALL_OR_NONE partially present                 → IncompleteGroupError
- required with no present member                → MissingRequiredError
- a present member while a group named in `conflicts` also has one → GroupConflictError

Required groups whose members can be back-filled by a default rule are skipped
by validate() (pass their flag names as `deferred`) and checked by require()
once the defaults are resolved.
"""

from .faults import *
from .logs import get_logger
from .schema import Exclusivity

log = get_logger(__name__)


def _labels(presence, names):
    return ", ".join(repr(presence.spec.flag(name).label) for name in names)


def _missing(presence, group):
    return MissingRequiredError(
        "one of %s is required" % _labels(presence, group.members),
        title="missing required flag",
        code=FaultCode.MISSING_REQUIRED,
        command=presence.spec.name,
        group=group.name,
        flags=group.members,
        hint="add one of %s to the command" % _labels(presence, group.members),
        docs=getdoc(FaultCode.MISSING_REQUIRED),
    )


def validate(presence, groups=None, /, *, deferred=()):
    """
    check every group against the PresenceMap.

    parameters
    - presence: PresenceMap
    - groups: sequence of Group (defaults to the groups of presence.spec)
    - deferred: flag names resolved later by default rules; required groups
      containing any of them are left to require().

    raises
    - ValidationError subclasses; returns None when every rule holds.
    """
    groups = presence.spec.groups if groups is None else groups
    deferred = frozenset(deferred)

    for group in groups:
        members = presence.members(group.members)

        if group.exclusivity is Exclusivity.AT_MOST_ONE and len(members) > 1:
            raise MutuallyExclusiveError(
                "%s cannot be used together" % _labels(presence, members),
                title="mutually exclusive flags",
                code=FaultCode.MUTUALLY_EXCLUSIVE,
                command=presence.spec.name,
                group=group.name,
                flags=members,
                hint="keep only one of %s" % _labels(presence, group.members),
                docs=getdoc(FaultCode.MUTUALLY_EXCLUSIVE),
            )

        if group.exclusivity is Exclusivity.ALL_OR_NONE and 0 < len(members) < len(group.members):
            absent = tuple(name for name in group.members if name not in members)
            raise IncompleteGroupError(
                "%s must be used together with %s" % (_labels(presence, members), _labels(presence, absent)),
                title="incomplete flag group",
                code=FaultCode.INCOMPLETE_GROUP,
                command=presence.spec.name,
                group=group.name,
                flags=members,
                hint="add %s or remove %s" % (_labels(presence, absent), _labels(presence, members)),
                docs=getdoc(FaultCode.INCOMPLETE_GROUP),
            )

        if group.required and not members and not deferred.intersection(group.members):
            raise _missing(presence, group)

        if members:
            for name in group.conflicts:
                other = presence.spec.group(name)
                if others := presence.members(other.members):
                    raise GroupConflictError(
                        "%s cannot be used with %s" % (_labels(presence, members), _labels(presence, others)),
                        title="conflicting flags",
                        code=FaultCode.GROUP_CONFLICT,
                        command=presence.spec.name,
                        group=group.name,
                        conflict=other.name,
                        flags=members + others,
                        hint="remove %s or %s" % (_labels(presence, members), _labels(presence, others)),
                        docs=getdoc(FaultCode.GROUP_CONFLICT),
                    )

    log.debug("groups.validated", command=presence.spec.name, groups=[group.name for group in groups])


def require(presence, groups=None, /):
    """
    check the `required` rule only, after default back-fill.
    """
    groups = presence.spec.groups if groups is None else groups
    for group in groups:
        if group.required and not presence.members(group.members):
            raise _missing(presence, group)


__all__ = (
    "validate",
    "require",
)
