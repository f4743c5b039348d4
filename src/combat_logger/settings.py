from __future__ import annotations

import logging
import os
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from platformdirs import user_config_dir
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

APP_SLUG = "combat-logger"
CONFIG_ENV_VAR = "COMBAT_LOGGER_CONFIG"


def default_config_path() -> Path:
    """Return the config file location.

    ``COMBAT_LOGGER_CONFIG`` wins when set, otherwise the per-user config
    directory reported by platformdirs.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path(user_config_dir(APP_SLUG)) / "config.yaml"


class KillerAttribution(str, Enum):
    ATTACKER = "attacker"
    RECENT_AGGRESSOR = "recent_aggressor"


class ExtraItemDescriptor(BaseModel):
    """A static item injected into gravestones, decoded once from config."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(..., ge=0, description="Numeric item id in the host item registry")
    aux: int = Field(0, ge=0, description="Auxiliary/variant value")
    count: int = Field(1, ge=1, le=255)
    custom_name: Optional[str] = Field(default=None, alias="customName")
    lore: Tuple[str, ...] = Field(default_factory=tuple)
    enchants: Tuple[Tuple[int, int], ...] = Field(default_factory=tuple)

    @field_validator("custom_name", mode="before")
    @classmethod
    def blank_name_is_none(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @field_validator("lore", mode="before")
    @classmethod
    def coerce_lore(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,)
        return tuple(str(line) for line in v)

    @field_validator("enchants", mode="before")
    @classmethod
    def flatten_enchants(cls, v: Any) -> Any:
        # YAML shape is a list of single-entry maps: [{9: 5}, {17: 3}]
        if v is None:
            return ()
        if isinstance(v, dict):
            v = [v]
        pairs: List[Tuple[int, int]] = []
        try:
            for entry in v:
                if isinstance(entry, dict):
                    for enchant_id, level in entry.items():
                        pairs.append((int(enchant_id), int(level)))
                else:
                    enchant_id, level = entry
                    pairs.append((int(enchant_id), int(level)))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"enchants must be a list of {{id: level}} maps ({exc})") from exc
        return tuple(pairs)

    def to_yaml(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "aux": self.aux,
            "count": self.count,
            "customName": self.custom_name or "",
            "lore": list(self.lore),
            "enchants": [{enchant_id: level} for enchant_id, level in self.enchants],
        }


class CombatSettings(BaseModel):
    """Runtime configuration for combat tagging, death handling and gravestones.

    YAML files use the camelCase keys shown as aliases; Python code uses the
    snake_case attribute names. Loading never raises: defects fall back to
    defaults field by field (see :meth:`load`).
    """

    model_config = ConfigDict(populate_by_name=True, validate_default=True)

    operators_can_be_in_combat: bool = Field(True, alias="operatorsCanBeInCombat")
    combat_time: int = Field(30, ge=1, alias="combatTime")
    combat_time_message_enabled: bool = Field(True, alias="combatTimeMessageEnabled")
    initiated_combat_message: str = Field("You are now in combat. Do not log out!", alias="initiatedCombatMessage")
    combat_time_message: str = Field("You are in combat for %time% more seconds!", alias="combatTimeMessage")
    ended_combat_message: str = Field("You are no longer in combat.", alias="endedCombatMessage")
    logout_while_in_combat_message: str = Field("%name% logged out while in combat!", alias="logoutWhileInCombatMessage")
    killed_by_player_message: str = Field("%victim% was slain by %killer% %health%", alias="killedByPlayerMessage")

    use_resource_pack_glyphs_in_death_message: bool = Field(False, alias="useResourcePackGlyphsInDeathMessage")
    execute_death_commands: bool = Field(True, alias="executeDeathCommands")
    death_command: str = Field("function death", alias="deathCommand")
    killer_command: str = Field("function killer", alias="killerCommand")
    killer_attribution: KillerAttribution = Field(KillerAttribution.ATTACKER, alias="killerAttribution")
    clear_killer_on_death: bool = Field(False, alias="clearKillerOnDeath")
    death_sequence_requires_combat: bool = Field(False, alias="deathSequenceRequiresCombat")

    set_chest_gravestone_on_death: bool = Field(False, alias="setChestGravestoneOnDeath")
    set_chest_gravestone_on_log: bool = Field(False, alias="setChestGravestoneOnLog")
    drop_inventory_on_log: bool = Field(True, alias="dropInventoryOnLog")
    gravestone_location_message: str = Field(
        "Your items were placed in a gravestone at %x% %y% %z% (%dimension%).", alias="gravestoneLocationMessage"
    )
    enable_extra_items_for_chest_gravestone: bool = Field(False, alias="enableExtraItemsForChestGravestone")
    extra_items: List[ExtraItemDescriptor] = Field(default_factory=list, alias="extraItems")
    search_radius: int = Field(4, ge=0, le=16, alias="searchRadius")
    search_height: int = Field(3, ge=0, le=16, alias="searchHeight")

    # ------------------------ Loading ------------------------
    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> Tuple["CombatSettings", List[str]]:
        """Validate a raw mapping, falling back to defaults for invalid parts.

        Returns the settings and a list of human-readable problems that were
        repaired. An invalid top-level field is replaced by its default; an
        invalid ``extraItems`` entry is dropped on its own.
        """
        problems: List[str] = []
        data = dict(data)
        known = cls._known_keys()
        for key in data:
            if key not in known:
                logger.warning("Ignoring unknown setting '%s'", key)
        items = data.get("extraItems", data.get("extra_items"))
        # Each failed pass removes at least one offending key or item.
        passes = len(data) + (len(items) if isinstance(items, list) else 0) + 1
        for _ in range(passes):
            try:
                return cls.model_validate(data), problems
            except ValidationError as exc:
                data = cls._drop_invalid(data, exc, problems)
        logger.error("Settings could not be repaired; using defaults")
        return cls(), problems

    @classmethod
    def _merge(cls, base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay ``overlay`` onto ``base`` with every key in its YAML spelling."""
        aliases = {name: field.alias or name for name, field in cls.model_fields.items()}
        merged = {aliases.get(k, k): v for k, v in base.items()}
        for k, v in (overlay or {}).items():
            merged[aliases.get(k, k)] = v
        return merged

    @classmethod
    def _known_keys(cls) -> Dict[str, str]:
        """Map every accepted key (alias or attribute name) to its attribute name."""
        keys: Dict[str, str] = {}
        for name, field in cls.model_fields.items():
            keys[name] = name
            if field.alias:
                keys[field.alias] = name
        return keys

    @classmethod
    def _drop_invalid(cls, data: Dict[str, Any], exc: ValidationError, problems: List[str]) -> Dict[str, Any]:
        repaired = dict(data)
        known = cls._known_keys()
        bad_items: set[int] = set()
        for err in exc.errors():
            loc = err.get("loc", ())
            if not loc:
                continue
            key = str(loc[0])
            name = known.get(key, key)
            if name == "extra_items" and len(loc) > 1 and isinstance(loc[1], int):
                bad_items.add(loc[1])
                problems.append(f"extraItems[{loc[1]}]: {err.get('msg')}")
                logger.warning("Dropping invalid extra item #%d: %s", loc[1], err.get("msg"))
                continue
            spellings = [k for k, v in known.items() if v == name and k in repaired]
            if spellings:
                for k in spellings:
                    repaired.pop(k)
                problems.append(f"{key}: {err.get('msg')}")
                logger.warning("Invalid value for '%s' (%s); using default", key, err.get("msg"))
        if bad_items:
            for key in ("extraItems", "extra_items"):
                if key in repaired:
                    items = repaired[key]
                    if isinstance(items, list):
                        repaired[key] = [item for i, item in enumerate(items) if i not in bad_items]
                    else:
                        repaired.pop(key)
        return repaired

    @staticmethod
    def _load_yaml(path: Path) -> Dict[str, Any]:
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ValueError(f"expected a mapping at the top level, got {type(raw).__name__}")
        return raw

    @classmethod
    def _default_data(cls) -> Dict[str, Any]:
        try:
            text = resources.files("combat_logger.config").joinpath("default_settings.yaml").read_text(encoding="utf-8")
            return yaml.safe_load(text) or {}
        except (FileNotFoundError, ModuleNotFoundError, yaml.YAMLError):
            logger.warning("Default settings resource not found; falling back to model defaults.")
            return cls().to_yaml()

    @classmethod
    def load_with_problems(cls, path: Optional[Path] = None, create: bool = True) -> Tuple["CombatSettings", List[str]]:
        path = path or default_config_path()
        default_data = cls._default_data()
        user_data: Dict[str, Any] = {}
        problems: List[str] = []
        if path.exists():
            try:
                user_data = cls._load_yaml(path)
                logger.info("Loaded combat settings from %s", path)
            except (OSError, ValueError, yaml.YAMLError) as exc:
                logger.error("Could not read %s (%s); using defaults", path, exc)
                problems.append(f"{path}: {exc}")
        elif create:
            defaults, _ = cls.from_mapping(default_data)
            try:
                defaults.save(path)
            except OSError as exc:
                logger.warning("Could not write default settings to %s: %s", path, exc)
        else:
            logger.warning("Settings file not found: %s", path)

        merged = cls._merge(default_data, user_data)
        settings, repaired = cls.from_mapping(merged)
        problems.extend(repaired)
        logger.debug("Settings merged: %s", settings)
        return settings, problems

    @classmethod
    def load(cls, path: Optional[Path] = None, create: bool = True) -> "CombatSettings":
        """Load settings from built-in defaults and an optional user file.

        A missing file is created with the defaults when ``create`` is true.
        Configuration defects are logged and repaired, never raised.
        """
        settings, _ = cls.load_with_problems(path, create=create)
        return settings

    # ------------------------ Saving ------------------------
    def to_yaml(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True, mode="json", exclude={"extra_items"})
        data["extraItems"] = [item.to_yaml() for item in self.extra_items]
        return data

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_yaml(), f, sort_keys=False, allow_unicode=True)
        logger.info("Saved combat settings to %s", path)


__all__ = [
    "APP_SLUG",
    "CONFIG_ENV_VAR",
    "CombatSettings",
    "ExtraItemDescriptor",
    "KillerAttribution",
    "default_config_path",
]
