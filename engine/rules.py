"""Default thresholds for the rule engine.

These are unitless: amounts are compared in whatever currency the
transactions were recorded in. Every engine function takes the matching
threshold as a keyword argument, and Config overrides them from [rules].
"""

from decimal import Decimal

# A non-essential purchase strictly above this amount is an impulse buy.
IMPULSE_THRESHOLD = Decimal("500")

# Same-category occurrences within one calendar month that make a habit.
HABIT_THRESHOLD = 4

# Habit alerts whose saving potential exceeds this are "bad", else "warning".
BAD_ALERT_THRESHOLD = Decimal("500")

# Month-over-month drop (as a fraction) that earns a "good" alert.
GOOD_DROP_RATIO = Decimal("0.25")
