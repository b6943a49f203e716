"""
Which cached query families a mutation makes stale.

Skill names are embedded in job and job seeker payloads, so a skill mutation
invalidates those families too.
"""

from typing import Dict, FrozenSet

INVALIDATION_GRAPH: Dict[str, FrozenSet[str]] = {
    "skills": frozenset({"skills", "jobs", "jobseekers"}),
    "jobs": frozenset({"jobs"}),
    "jobseekers": frozenset({"jobseekers"}),
}


def affected_families(resource: str) -> FrozenSet[str]:
    """Families to invalidate after a successful mutation of `resource`."""
    return INVALIDATION_GRAPH.get(resource, frozenset({resource}))
