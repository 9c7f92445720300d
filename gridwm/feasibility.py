"""
Layout Feasibility Validator

Checks a layout template's slot sizes against each participating app's
discovered minimum size. Apps without a known constraint are assumed to fit.
"""

from __future__ import annotations
import logging
from typing import Iterable, List, Optional, Sequence

from . import topics
from .discovery import ConstraintDiscovery
from .objects import (
    FeasibilityResult,
    LayoutTemplate,
    SizeViolation,
    ViolationType,
    WindowState,
)
from .protocol import Size

_LOG = logging.getLogger(__name__)


class FeasibilityValidator:
    def __init__(self, discovery: ConstraintDiscovery, bus=None):
        self.discovery = discovery
        self.bus = bus

    def validate_layout_feasibility(
        self,
        layout: LayoutTemplate,
        windows: Sequence[WindowState],
        screen_resolution: Size,
    ) -> FeasibilityResult:
        """
        Check whether every slot can hold the window assigned to it.

        Slot i is filled by windows[i]; slots beyond the window count are
        ignored.

        Returns:
            FeasibilityResult; is_feasible is True when no slot violates its
            app's minimum size
        """
        violations: List[SizeViolation] = []
        feasible_apps: List[str] = []

        _LOG.debug(
            "Validating %s on %dx%d",
            layout.name,
            screen_resolution.width,
            screen_resolution.height,
        )

        for index, (slot, window) in enumerate(zip(layout.slots, windows)):
            target = Size(
                slot.width * screen_resolution.width,
                slot.height * screen_resolution.height,
            )
            constraint = self.discovery.get_constraints(window.app)
            if constraint is None:
                _LOG.debug(
                    "Slot %d (%s): no constraints for %s, assuming feasible",
                    index + 1,
                    slot.role,
                    window.app,
                )
                feasible_apps.append(window.app)
                continue

            width_ok = target.width >= constraint.min_width
            height_ok = target.height >= constraint.min_height
            if width_ok and height_ok:
                feasible_apps.append(window.app)
                continue

            if not width_ok and not height_ok:
                violation_type = ViolationType.BOTH
            elif not width_ok:
                violation_type = ViolationType.WIDTH
            else:
                violation_type = ViolationType.HEIGHT

            violation = SizeViolation(
                app=window.app,
                role=slot.role,
                target_size=target,
                min_size=constraint.min_size,
                violation_type=violation_type,
            )
            _LOG.debug("Slot %d violation (%s): %s", index + 1, violation_type.value, violation)
            violations.append(violation)

        result = FeasibilityResult(
            is_feasible=not violations,
            violations=violations,
            feasible_apps=feasible_apps,
        )
        _LOG.info("%s: %s", layout.name, result.summary)
        if self.bus is not None:
            self.bus.sendMessage(
                topics.LAYOUT_FEASIBILITY_CHECKED, template=layout, result=result
            )
        return result

    def choose_feasible(
        self,
        templates: Iterable[LayoutTemplate],
        windows: Sequence[WindowState],
        screen_resolution: Size,
    ) -> Optional[LayoutTemplate]:
        """Return the first template whose slots fit every app, or None."""
        for template in templates:
            if self.validate_layout_feasibility(template, windows, screen_resolution).is_feasible:
                return template
        return None
