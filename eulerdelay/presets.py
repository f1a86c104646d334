"""Factory presets and XML preset files for the delay parameters."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from eulerdelay.parameters import DelayParameters, FactoryPreset

PLUGIN_NAME = "EulerDelay"
STATE_ID = "Preset"

FACTORY_PRESETS = (
    FactoryPreset("Preset1", (111.0, 111.0), 50.0, 35.0, -10.0),
    FactoryPreset("Preset2", (222.0, 222.0), 50.0, 35.0, -10.0),
    FactoryPreset("Preset3", (333.0, 333.0), 50.0, 35.0, -10.0),
)


def default_preset_dir() -> Path:
    """Directory offered for user presets: the plugin's folder under Documents."""
    return Path.home() / "Documents" / PLUGIN_NAME


class PresetManager:
    """Applies factory presets, saves and loads XML presets, and remembers the current one."""

    state_id = STATE_ID

    def __init__(self, parameters: DelayParameters, preset_dir: Path | None = None) -> None:
        self.parameters = parameters
        self.preset_dir = default_preset_dir() if preset_dir is None else Path(preset_dir)
        self.factory_presets: tuple[FactoryPreset, ...] = FACTORY_PRESETS
        self.factory_preset_current = -1
        self.xml_preset_current = ""

    @property
    def num_factory_presets(self) -> int:
        return len(self.factory_presets)

    def _factory(self, index: int) -> FactoryPreset:
        if not 0 <= index < len(self.factory_presets):
            raise IndexError(
                f"factory preset {index} outside [0, {len(self.factory_presets)})"
            )
        return self.factory_presets[index]

    def factory_preset_name(self, index: int) -> str:
        return self._factory(index).name

    def set_factory_preset(self, index: int) -> None:
        """Apply the factory preset at ``index`` and make it current."""
        preset = self._factory(index)
        self.factory_preset_current = index
        self.parameters.apply_factory_preset(preset)

    def save_xml_preset(self, path: str | Path) -> None:
        """Write the current parameter state to ``path`` and make it the current preset."""
        path = Path(path)
        tree = ET.ElementTree(self.parameters.copy_state())
        tree.write(path, encoding="utf-8", xml_declaration=True)
        self.xml_preset_current = path.stem

    def load_xml_preset(self, path: str | Path) -> bool:
        """Load a preset file; return False if it is not a parameter state of this plugin."""
        path = Path(path)
        try:
            root = ET.parse(path).getroot()
        except ET.ParseError:
            return False
        if not self.parameters.apply_state(root):
            return False
        self.xml_preset_current = path.stem
        return True

    def state(self) -> ET.Element:
        """Return the preset state: an element naming the current preset."""
        return ET.Element(self.state_id, name=self.xml_preset_current)

    def set_by_state(self, state: ET.Element) -> None:
        """Restore the current preset name from a state made by ``state()``."""
        if state.tag == self.state_id:
            self.xml_preset_current = state.get("name", "")