from .registry import TestTypeRegistry
from .strength import StrengthHandler
from .rom_spine import RomSpineExtremityHandler
from .rom_hand import RomHandFootHandler
from .occupational import OccupationalHandler
from .cardio import CardioHandler

registry = TestTypeRegistry()

# Registration order is the protocol tab order
registry.register(StrengthHandler())
registry.register(RomSpineExtremityHandler())
registry.register(RomHandFootHandler())
registry.register(OccupationalHandler())
registry.register(CardioHandler())

__all__ = ["registry", "TestTypeRegistry"]
