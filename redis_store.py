"""
Redis Store - Persistence for completed assessment sessions.

Key Structure:
    session:{session_id}:state   -> Hash (phase, score, final_difficulty, skill, ...)
    session:{session_id}:mastery -> Hash (concept -> score)
    session:{session_id}:answers -> List (JSON of each answered record)
    session:{session_id}:summary -> String (JSON session summary)
"""

import os
import json
import redis
from typing import Dict, Optional, List
from dotenv import load_dotenv

from assessment import SessionResults

# Load environment variables from .env
load_dotenv()


class RedisStore:
    def __init__(self, client: Optional[redis.Redis] = None):
        """
        Connect to Redis using environment variables.

        Args:
            client: Pre-built client (tests pass a fake here)
        """
        self.client = client or redis.Redis(
            host=os.getenv("REDIS_HOST", "localhost"),
            port=int(os.getenv("REDIS_PORT", 6379)),
            password=os.getenv("REDIS_PASSWORD", None),
            decode_responses=True  # Return strings instead of bytes
        )

    # ==================== Key Builders ====================

    def _state_key(self, session_id: str) -> str:
        """Redis key for session state."""
        return f"session:{session_id}:state"

    def _mastery_key(self, session_id: str) -> str:
        """Redis key for mastery scores."""
        return f"session:{session_id}:mastery"

    def _answers_key(self, session_id: str) -> str:
        """Redis key for answer history."""
        return f"session:{session_id}:answers"

    def _summary_key(self, session_id: str) -> str:
        """Redis key for the results summary."""
        return f"session:{session_id}:summary"

    # ==================== Results ====================

    def save_results(self, session_id: str, results: SessionResults):
        """
        Store the results of a completed session, replacing older ones.

        Args:
            session_id: Session the results belong to
            results: Results handed to the completion callback
        """
        self.delete_session(session_id)

        state = {
            "phase": "complete",
            "score": results.score,
            "final_difficulty": results.final_difficulty,
            "skill": results.skill,
            "questions_answered": len(results.records),
            "percent_score": results.summary.percent_score,
        }
        self.client.hset(self._state_key(session_id), mapping=state)

        if results.mastery:
            self.client.hset(self._mastery_key(session_id), mapping=results.mastery)

        if results.records:
            self.client.rpush(
                self._answers_key(session_id),
                *[json.dumps(r.to_dict()) for r in results.records]
            )

        self.client.set(self._summary_key(session_id), json.dumps(results.summary.to_dict()))

    def get_session(self, session_id: str) -> Optional[Dict]:
        """
        Retrieve stored results for a session.

        Args:
            session_id: Session to retrieve

        Returns:
            Dict with state, mastery, answers and summary, or None if not found
        """
        state_key = self._state_key(session_id)

        # Check if session exists
        if not self.client.exists(state_key):
            return None

        raw = self.client.hgetall(state_key)
        state = {
            "phase": raw.get("phase", "complete"),
            "score": int(raw.get("score", 0)),
            "final_difficulty": float(raw.get("final_difficulty", 0.0)),
            "skill": float(raw.get("skill", 0.0)),
            "questions_answered": int(raw.get("questions_answered", 0)),
            "percent_score": int(raw.get("percent_score", 0)),
        }

        summary_raw = self.client.get(self._summary_key(session_id))

        return {
            "session_id": session_id,
            "state": state,
            "mastery": self.get_mastery(session_id),
            "answers": self.get_answers(session_id),
            "summary": json.loads(summary_raw) if summary_raw else None
        }

    def delete_session(self, session_id: str):
        """
        Delete all data for a session.

        Args:
            session_id: Session to delete
        """
        self.client.delete(
            self._state_key(session_id),
            self._mastery_key(session_id),
            self._answers_key(session_id),
            self._summary_key(session_id)
        )

    # ==================== Mastery ====================

    def get_mastery(self, session_id: str) -> Dict[str, float]:
        """
        Get final mastery scores for all concepts.

        Args:
            session_id: Session to query

        Returns:
            Dict of concept -> mastery score
        """
        mastery_raw = self.client.hgetall(self._mastery_key(session_id))
        return {k: float(v) for k, v in mastery_raw.items()}

    # ==================== Answers ====================

    def get_answers(self, session_id: str) -> List[Dict]:
        """
        Get all recorded answers for a session.

        Args:
            session_id: Session to query

        Returns:
            List of answer records
        """
        answers_raw = self.client.lrange(self._answers_key(session_id), 0, -1)
        return [json.loads(a) for a in answers_raw]
