"""Selector normalization.

Turns raw EC2/IAM metadata into namespaced selector values:

    tag:<key>:<value>
    sg:id:<group-id>
    sg:name:<group-name>
    iamrole:<role-arn>

and collapses them into a sorted, duplicate-free selector list.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..constants import SELECTOR_TYPE


@dataclass(frozen=True, order=True)
class Selector:
    """A normalized authorization attribute."""
    type: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def resolve_tags(tags: Optional[Iterable[Dict[str, Any]]]) -> List[str]:
    """Build one selector value per instance tag."""
    return [f"tag:{tag.get('Key') or ''}:{tag.get('Value') or ''}" for tag in tags or []]


def resolve_security_groups(groups: Optional[Iterable[Dict[str, Any]]]) -> List[str]:
    """Build id and name selector values per security group."""
    values: List[str] = []
    for group in groups or []:
        values.append(f"sg:id:{group.get('GroupId') or ''}")
        values.append(f"sg:name:{group.get('GroupName') or ''}")
    return values


def resolve_instance_profile(roles: Optional[Iterable[Dict[str, Any]]]) -> List[str]:
    """Build one selector value per instance profile role with an ARN."""
    return [f"iamrole:{role['Arn']}" for role in roles or [] if role.get("Arn")]


def resolve_instance(instance: Dict[str, Any]) -> List[str]:
    """Selector values readable directly from an instance record."""
    return resolve_tags(instance.get("Tags")) + resolve_security_groups(instance.get("SecurityGroups"))


def normalize_selectors(values: Iterable[str], selector_type: str = SELECTOR_TYPE) -> List[Selector]:
    """Deduplicate and sort raw values into selectors.

    Ordering depends only on the set of values, never on the order they
    were collected in.

    Example:
        >>> normalize_selectors(["sg:id:sg-1", "tag:Name:web1", "sg:id:sg-1"])
        [Selector(type='aws_iid', value='sg:id:sg-1'), Selector(type='aws_iid', value='tag:Name:web1')]
    """
    return [Selector(type=selector_type, value=value) for value in sorted(set(values))]
