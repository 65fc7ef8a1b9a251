"""
tests/unit/test_guard.py - Single-entry guard tests.
"""

import unittest

from core.constants import ErrorCode
from core.exceptions import ReentrancyError
from execution.guard import GuardState, SingleEntryGuard, VALID_TRANSITIONS


class TestSingleEntryGuard(unittest.TestCase):

    def setUp(self):
        self.guard = SingleEntryGuard()

    def test_starts_idle(self):
        self.assertEqual(self.guard.state, GuardState.IDLE)
        self.assertFalse(self.guard.locked)

    def test_locked_inside(self):
        with self.guard.enter("settle"):
            self.assertTrue(self.guard.locked)
        self.assertFalse(self.guard.locked)

    def test_nested_rejected(self):
        with self.guard.enter("settle"):
            with self.assertRaises(ReentrancyError) as ctx:
                with self.guard.enter("settle"):
                    pass
            self.assertEqual(ctx.exception.code, ErrorCode.REENTRANT_CALL)
            self.assertEqual(ctx.exception.details["operation"], "settle")
            # Outer call still holds the guard
            self.assertTrue(self.guard.locked)
        self.assertEqual(self.guard.state, GuardState.IDLE)

    def test_released_on_error(self):
        with self.assertRaises(RuntimeError):
            with self.guard.enter("settle"):
                raise RuntimeError("adapter failed")
        self.assertEqual(self.guard.state, GuardState.IDLE)

        with self.guard.enter("settle"):
            pass

    def test_transition_table(self):
        self.assertEqual(VALID_TRANSITIONS[GuardState.IDLE], [GuardState.IN_PROGRESS])
        self.assertEqual(VALID_TRANSITIONS[GuardState.IN_PROGRESS], [GuardState.IDLE])


if __name__ == "__main__":
    unittest.main()
