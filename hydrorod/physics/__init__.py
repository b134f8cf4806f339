"""Пакет физики (клапаны, насос, цилиндры, нагрузка, динамика)."""

from __future__ import annotations

from .dynamics import DynamicState, RodDynamics, StepDiagnostics
from .hydraulics import CylinderResponse, HydraulicCylinder, orifice_flow
from .load_model import MechanicalLoad
from .pump import Pump
from .valves import ConstantValves, RepeatingSequence, ValveSchedule

__all__ = [
    "RodDynamics",
    "DynamicState",
    "StepDiagnostics",
    "HydraulicCylinder",
    "CylinderResponse",
    "orifice_flow",
    "MechanicalLoad",
    "Pump",
    "ValveSchedule",
    "ConstantValves",
    "RepeatingSequence",
]
