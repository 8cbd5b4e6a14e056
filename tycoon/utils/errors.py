# tycoon/utils/errors.py
class UserInputError(RuntimeError):
    """
    Raised for invalid user-provided CLI input (unknown tier, bad flag name).
    Should NOT print traceback.
    """


class ScheduleConfigError(ValueError):
    """
    Raised when a rate table is malformed:
    interval < 1, offset outside [0, interval), duplicate names,
    or two entries with the same interval sharing an offset.
    """
