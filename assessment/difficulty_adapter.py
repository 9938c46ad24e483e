"""
Difficulty Adapter - Moves the target difficulty after every answer.

The step grows with streaks, shrinks for low-confidence correct guesses,
grows for confident mistakes, and is scaled by response latency relative
to a 30 second average.
"""


class DifficultyAdapter:
    """Computes the next target difficulty. Stateless."""

    BASE_FACTOR = 0.1
    STREAK_BONUS = 0.05  # Per answer beyond the first in a streak
    STREAK_MIN = 2

    AVERAGE_TIME = 30.0  # Seconds
    MAX_SPEED_BOOST = 2.0
    MIN_SLOW_DAMPING = 0.5

    def adjust(self, current_difficulty: float, is_correct: bool, confidence: float,
               time_spent: float, consecutive_correct: int, consecutive_incorrect: int) -> float:
        """
        Return the new target difficulty in [0, 1].

        Streak counters must already include the answer being graded.
        """
        current_difficulty = max(0.0, min(1.0, current_difficulty))
        confidence = max(0.0, min(1.0, confidence))

        factor = self.BASE_FACTOR

        streak = consecutive_correct if is_correct else consecutive_incorrect
        if streak >= self.STREAK_MIN:
            factor *= 1 + self.STREAK_BONUS * (streak - 1)

        if is_correct:
            factor *= 0.5 + confidence * 0.5
        else:
            factor *= 0.5 + (1 - confidence) * 0.5

        time_ratio = self._time_ratio(time_spent)
        if is_correct and time_ratio > 1:
            factor *= min(time_ratio, self.MAX_SPEED_BOOST)
        elif not is_correct and time_ratio < 1:
            factor *= max(time_ratio, self.MIN_SLOW_DAMPING)

        if is_correct:
            return min(current_difficulty + factor, 1.0)
        return max(current_difficulty - factor, 0.0)

    def _time_ratio(self, time_spent: float) -> float:
        # An instant answer counts as infinitely fast
        if time_spent <= 0:
            return float("inf")
        return self.AVERAGE_TIME / time_spent
