import os
import sys
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from views.modal_dialog import (  # noqa: E402
    fits_terminal,
    plan_buttons,
)


class DialogRulesTestCase(unittest.TestCase):
    def test_destructive_question_focuses_cancel(self):
        plan = plan_buttons("error", can_cancel=True)
        self.assertEqual(plan.confirm_variant, "error")
        self.assertEqual(plan.focus_id, "btn-cancel")

    def test_plain_questions_focus_confirm(self):
        self.assertEqual(plan_buttons("warning", True).focus_id, "btn-confirm")
        self.assertEqual(plan_buttons("positive", True).confirm_variant, "success")
        # nothing to fall back on without a cancel button
        self.assertEqual(plan_buttons("error", False).focus_id, "btn-confirm")

    def test_fits_terminal(self):
        self.assertTrue(fits_terminal(80, 24))
        self.assertTrue(fits_terminal(200, 60))
        self.assertFalse(fits_terminal(79, 40))
        self.assertFalse(fits_terminal(120, 23))
        self.assertTrue(fits_terminal(40, 10, minimum=(40, 10)))


if __name__ == "__main__":
    unittest.main()
