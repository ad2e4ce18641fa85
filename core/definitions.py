"""
Slash command definitions and their JSON form for bulk registration.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Union


class OptionType(IntEnum):
    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11


@dataclass
class CommandOption:
    name: str
    description: str
    type: OptionType = OptionType.STRING
    required: bool = False
    choices: List[Dict[str, Union[str, int, float]]] = field(default_factory=list)
    options: List["CommandOption"] = field(default_factory=list)
    channel_types: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "type": int(self.type),
        }
        # Subcommands carry nested options instead of a required flag
        if self.type in (OptionType.SUB_COMMAND, OptionType.SUB_COMMAND_GROUP):
            payload["options"] = [option.to_dict() for option in self.options]
        else:
            payload["required"] = self.required
            if self.choices:
                payload["choices"] = list(self.choices)
            if self.channel_types:
                payload["channel_types"] = list(self.channel_types)
        return payload


@dataclass
class SlashCommand:
    """A chat-input command as registered with the platform."""
    name: str
    description: str
    options: List[CommandOption] = field(default_factory=list)
    dm_permission: bool = True
    default_member_permissions: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "type": 1,
            "options": [option.to_dict() for option in self.options],
            "dm_permission": self.dm_permission,
        }
        if self.default_member_permissions is not None:
            payload["default_member_permissions"] = str(self.default_member_permissions)
        return payload


def definition_name(definition: Any) -> Optional[str]:
    """Name of a SlashCommand or of a raw definition mapping."""
    if isinstance(definition, dict):
        name = definition.get("name")
    else:
        name = getattr(definition, "name", None)
    return name if isinstance(name, str) and name else None


def serialize_definition(definition: Any) -> Dict[str, Any]:
    if isinstance(definition, dict):
        return dict(definition)
    return definition.to_dict()
