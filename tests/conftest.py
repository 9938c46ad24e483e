"""Shared fixtures: question factory, scripted randomness, in-memory Redis."""

import pytest

from assessment import Question, QuestionOption


class ScriptedRandom:
    """random.Random stand-in that replays fixed values (then repeats the last)."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


class FakeRedis:
    """Just enough of redis.Redis(decode_responses=True) for RedisStore."""

    def __init__(self):
        self.data = {}

    def hset(self, key, field=None, value=None, mapping=None):
        h = self.data.setdefault(key, {})
        if mapping:
            for k, v in mapping.items():
                h[str(k)] = str(v)
        if field is not None:
            h[str(field)] = str(value)
        return len(mapping or {}) + (1 if field is not None else 0)

    def hgetall(self, key):
        return dict(self.data.get(key, {}))

    def exists(self, *keys):
        return sum(1 for k in keys if k in self.data)

    def rpush(self, key, *values):
        lst = self.data.setdefault(key, [])
        lst.extend(str(v) for v in values)
        return len(lst)

    def lrange(self, key, start, end):
        lst = self.data.get(key, [])
        end = len(lst) if end == -1 else end + 1
        return lst[start:end]

    def set(self, key, value):
        self.data[key] = str(value)
        return True

    def get(self, key):
        return self.data.get(key)

    def delete(self, *keys):
        removed = 0
        for k in keys:
            if self.data.pop(k, None) is not None:
                removed += 1
        return removed


@pytest.fixture
def make_question():
    """Factory for questions whose correct option is always "a"."""
    def _make(qid, difficulty=0.5, concept=None, last_correct=None, correct="a", explanation=None):
        return Question(
            id=qid,
            prompt=f"Question {qid}?",
            options=[QuestionOption(id=o, text=o.upper()) for o in ("a", "b", "c", "d")],
            correct_option_id=correct,
            difficulty=difficulty,
            concept=concept,
            explanation=explanation,
            last_answered_correctly=last_correct,
        )
    return _make


@pytest.fixture
def scripted_rng():
    return ScriptedRandom


@pytest.fixture
def fake_redis():
    return FakeRedis()
