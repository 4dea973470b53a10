# models/consoleType.py
import enum


class ConsoleType(enum.Enum):
    ps5 = 'ps5'
    ps4 = 'ps4'
    xbox = 'xbox'
    pc = 'pc'
    pool = 'pool'
    snooker = 'snooker'
    arcade = 'arcade'
    vr = 'vr'
    steering = 'steering'
    racing_sim = 'racing_sim'

    @property
    def label(self):
        return CONSOLE_LABELS[self]

    @property
    def station_prefix(self):
        """Prefix used for synthesized station names, e.g. PS5 in PS5-01."""
        return self.value.upper()

    @property
    def is_gaming_console(self):
        """Gaming consoles are priced per controller count."""
        return self in GAMING_CONSOLES

    @classmethod
    def parse(cls, value):
        """
        Resolve 'PS5', 'ps5', 'Racing Sim' or a ConsoleType into a ConsoleType.
        Returns None for unknown or empty values.
        """
        if isinstance(value, cls):
            return value
        if not value:
            return None
        key = str(value).strip().lower().replace(' ', '_').replace('-', '_')
        try:
            return cls(key)
        except ValueError:
            return None


CONSOLE_LABELS = {
    ConsoleType.ps5: 'PS5',
    ConsoleType.ps4: 'PS4',
    ConsoleType.xbox: 'Xbox',
    ConsoleType.pc: 'PC',
    ConsoleType.pool: 'Pool Table',
    ConsoleType.snooker: 'Snooker',
    ConsoleType.arcade: 'Arcade Machine',
    ConsoleType.vr: 'VR',
    ConsoleType.steering: 'Racing Setup',
    ConsoleType.racing_sim: 'Racing Sim',
}

GAMING_CONSOLES = frozenset({ConsoleType.ps5, ConsoleType.ps4, ConsoleType.xbox})
