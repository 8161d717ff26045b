"""Signal registry: discovers ReadinessSignal subclasses and owns their blend weights."""

from __future__ import annotations

import importlib
import logging
import math
import pkgutil
from pathlib import Path
from typing import Iterable

from load_intelligence.readiness.signals.base import ReadinessSignal

logger = logging.getLogger(__name__)


class SignalRegistry:
    """Holds the readiness signals and answers blend questions about them.

    Signals are found by importing every module of the readiness.signals
    package; a new signal is added by placing a module there. The registry
    is the single source of blend weights and tie-break priorities, so the
    scorer never reads those off signal instances directly.
    """

    def __init__(self) -> None:
        self._signals: dict[str, ReadinessSignal] = {}
        self._scanned_modules: set[str] = set()

    def discover_signals(self) -> tuple[str, ...]:
        """Register every concrete signal in the signals package.

        Returns the ids registered by this call; modules already scanned are
        skipped, so repeated discovery is a no-op.
        """
        import load_intelligence.readiness.signals as signals_pkg

        signals_path = Path(signals_pkg.__file__).parent  # type: ignore[arg-type]
        added: list[str] = []
        for _, module_name, _ in pkgutil.iter_modules([str(signals_path)], prefix=signals_pkg.__name__ + "."):
            if module_name in self._scanned_modules:
                continue
            self._scanned_modules.add(module_name)
            try:
                module = importlib.import_module(module_name)
            except ImportError:
                logger.warning("Could not import readiness signal module %s", module_name, exc_info=True)
                continue
            for signal_cls in _concrete_signals(vars(module).values()):
                if signal_cls.__module__ != module_name:
                    continue
                signal = signal_cls()
                if self.register(signal):
                    added.append(signal.signal_id)

        if added:
            logger.debug("Discovered readiness signals: %s", ", ".join(sorted(added)))
        return tuple(added)

    def register(self, signal: ReadinessSignal) -> bool:
        """Register (or replace) a signal; one with an unusable weight is refused."""
        weight = getattr(signal, "weight", None)
        if not isinstance(weight, (int, float)) or not math.isfinite(weight) or weight <= 0:
            logger.warning("Refusing readiness signal %s with weight %r", signal.signal_id, weight)
            return False
        if signal.signal_id in self._signals:
            logger.debug("Replacing readiness signal %s", signal.signal_id)
        self._signals[signal.signal_id] = signal
        return True

    def unregister(self, signal_id: str) -> ReadinessSignal | None:
        return self._signals.pop(signal_id, None)

    def get(self, signal_id: str) -> ReadinessSignal | None:
        return self._signals.get(signal_id)

    def get_all_signals(self) -> list[ReadinessSignal]:
        """All registered signals, highest priority (lowest value) first."""
        return sorted(self._signals.values(), key=lambda s: (s.priority, s.signal_id))

    def weights(self, signal_ids: Iterable[str] | None = None) -> dict[str, float]:
        """Blend weights renormalized to sum to 1 over ``signal_ids``.

        Defaults to every registered signal. Unknown ids are ignored; an
        empty selection gives an empty dict.
        """
        wanted = self._signals.keys() if signal_ids is None else signal_ids
        raw = {sid: float(self._signals[sid].weight) for sid in wanted if sid in self._signals}
        total = sum(raw.values())
        if total <= 0:
            return {}
        return {sid: weight / total for sid, weight in raw.items()}

    def priority_of(self, signal_id: str) -> int:
        """Tie-break rank for ordering warnings; unknown signals sort last."""
        signal = self._signals.get(signal_id)
        return int(signal.priority) if signal is not None else 99

    @property
    def signal_ids(self) -> list[str]:
        return list(self._signals.keys())


def _concrete_signals(candidates: Iterable[object]) -> list[type[ReadinessSignal]]:
    return [
        attr
        for attr in candidates
        if isinstance(attr, type)
        and issubclass(attr, ReadinessSignal)
        and attr is not ReadinessSignal
        and not getattr(attr, "__abstractmethods__", set())
    ]
