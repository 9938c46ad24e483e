"""
Skill Estimator - Running estimate of learner ability on the difficulty scale.
"""


class SkillEstimator:
    """
    Exponential moving average over confidence-weighted outcomes.

        skill' = skill * 0.7 + outcome * 0.3 * confidence_factor

    where outcome is 1 for a correct answer and 0 otherwise, and the
    confidence factor is the declared confidence (correct) or its
    complement (incorrect). The result is clamped to [0, 1].
    """

    HISTORY_WEIGHT = 0.7
    OBSERVATION_WEIGHT = 0.3
    INITIAL_SKILL = 0.5

    def update(self, prior_skill: float, is_correct: bool, confidence: float) -> float:
        confidence = max(0.0, min(1.0, confidence))
        confidence_factor = confidence if is_correct else 1 - confidence
        outcome = 1.0 if is_correct else 0.0

        new_skill = (prior_skill * self.HISTORY_WEIGHT
                     + outcome * self.OBSERVATION_WEIGHT * confidence_factor)
        return max(0.0, min(1.0, new_skill))
