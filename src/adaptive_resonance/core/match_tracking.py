"""
Match-Tracking Controller.

Given an input and the target-space category it must map to, drives the
input-space learner until its winner maps to that category (or is newly
mapped), raising the input vigilance after each map-field conflict. The
search is bounded twice: by the vigilance ceiling and by a maximum number
of attempts.
"""

import logging
from typing import List, Optional

from ..configs.schema import ARTMAPConfig, MatchTrackingMode
from .art import FuzzyART, SearchDecision
from .map_field import MapField
from .results import (
    CapacityExhausted,
    LearnState,
    MapFieldMismatch,
    SearchStep,
    Space,
    TrainOutcome,
    TrainSuccess,
)

logger = logging.getLogger(__name__)


class MatchTracker:
    """
    Supervised search over the input-space module.

    The tracker holds no model state of its own; it reads and writes the
    learner and map field it is given. The caller serialises calls.
    """

    def __init__(self, config: ARTMAPConfig, input_module: FuzzyART, map_field: MapField):
        self.config = config
        self.input_module = input_module
        self.map_field = map_field
        self.last_vigilance = self.baseline_vigilance

    @property
    def baseline_vigilance(self) -> float:
        """Configured input vigilance, never above the ceiling."""
        return min(self.config.input_module.vigilance, self.config.max_vigilance)

    def next_vigilance(self, vigilance: float, match_score: float) -> float:
        """Raised vigilance after a conflict; never lower than ``vigilance``."""
        increment = self.config.vigilance_increment
        if self.config.match_tracking == MatchTrackingMode.MATCH_PLUS:
            # Just enough to reset the conflicting category
            raised = max(vigilance + increment, match_score + increment)
        else:
            raised = vigilance + increment
        return min(raised, self.config.max_vigilance)

    def track(
        self, coded_input, target_index: int, b_score: float
    ) -> TrainOutcome:
        """
        Run match tracking for one complement-coded input.

        Args:
            coded_input: Input already validated and complement-coded by the
                input module
            target_index: Target-space category the input must map to
            b_score: Match score of the target module's step, reported back

        Returns:
            ``TrainSuccess``, ``MapFieldMismatch`` or ``CapacityExhausted``
        """
        vigilance = self.baseline_vigilance
        trace: List[SearchStep] = []
        conflict: Optional[SearchDecision] = None
        conflict_target: Optional[int] = None

        for attempt in range(self.config.max_search_attempts):
            decision = self.input_module._search(coded_input, vigilance)
            trace.append(SearchStep(
                attempt=attempt,
                vigilance=vigilance,
                input_index=decision.category_index,
                match_score=decision.match,
                state=decision.state,
            ))
            self.last_vigilance = vigilance

            if decision.state is LearnState.EXHAUSTED:
                return self._exhausted(decision, target_index, b_score, tuple(trace))

            a_index = decision.category_index
            mapped = self.map_field.lookup(a_index)
            if mapped is None:
                self.input_module._commit(decision)
                self.map_field.associate(a_index, target_index)
                return TrainSuccess(
                    a_index=a_index,
                    b_index=target_index,
                    map_field_confidence=self.map_field.activation(a_index, target_index),
                    was_new_mapping=True,
                    a_score=decision.match,
                    b_score=b_score,
                    search_trace=tuple(trace),
                )

            confidence = self.map_field.activation(a_index, target_index)
            if confidence >= self.config.map_vigilance:
                self.input_module._commit(decision)
                return TrainSuccess(
                    a_index=a_index,
                    b_index=target_index,
                    map_field_confidence=confidence,
                    was_new_mapping=False,
                    a_score=decision.match,
                    b_score=b_score,
                    search_trace=tuple(trace),
                )

            conflict, conflict_target = decision, mapped
            if vigilance >= self.config.max_vigilance:
                break
            vigilance = self.next_vigilance(vigilance, decision.match)

        # The label could not be resolved; the final winner still learns
        self.input_module._commit(conflict)
        logger.debug(
            f"Map field mismatch after {len(trace)} attempts: input category "
            f"{conflict.category_index} maps to {conflict_target}, expected {target_index}"
        )
        return MapFieldMismatch(
            expected_index=target_index,
            actual_index=conflict_target,
            input_index=conflict.category_index,
            search_trace=tuple(trace),
        )

    def _exhausted(
        self,
        decision: SearchDecision,
        target_index: int,
        b_score: float,
        trace: tuple,
    ) -> TrainOutcome:
        """Input space is full and nothing resonates; maybe relax."""
        if (
            self.config.allow_relaxed_reassignment
            and not self.map_field.categories_for(target_index)
            and decision.activation.closest() is not None
        ):
            closest = decision.activation.closest()
            forced = decision.redirect(closest)
            self.input_module._commit(forced)
            previous = self.map_field.reassign(closest, target_index)
            logger.warning(
                f"Relaxed reassignment: input category {closest} now maps to "
                f"{target_index} (was {previous})"
            )
            return TrainSuccess(
                a_index=closest,
                b_index=target_index,
                map_field_confidence=self.map_field.activation(closest, target_index),
                was_new_mapping=True,
                a_score=forced.match,
                b_score=b_score,
                search_trace=trace,
                reassigned_from=previous,
            )

        self.input_module._commit(decision)  # logs the exhaustion
        return CapacityExhausted(
            space=Space.INPUT, target_index=target_index, search_trace=trace
        )
