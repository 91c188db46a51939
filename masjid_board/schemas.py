# masjid_board/schemas.py

from marshmallow import Schema, fields, validate, pre_load, EXCLUDE

from .services.iqamaah.normalizer import normalize_payload_aliases
from .utils.constants import MIN_SCHEDULE_YEAR, MAX_SCHEDULE_YEAR


class MessageSchema(Schema):
    message = fields.Str(required=True)

# --- Iqamaah Input Schemas ---
# Dates stay strings here: the service accepts both YYYY-MM-DD and M/D/YYYY
# and reports format problems with its own error types.

class IqamaahRangeSchema(Schema):
    """One validity window: a congregation time in effect from startDate to endDate."""
    startDate = fields.Str(required=True)
    endDate = fields.Str(required=True)
    time = fields.Str(required=True)

class IqamaahTimesPayloadSchema(Schema):
    """Full set of windows for all five prayers (bulk replace)."""
    class Meta:
        unknown = EXCLUDE

    fajr = fields.List(fields.Nested(IqamaahRangeSchema), required=True)
    dhuhr = fields.List(fields.Nested(IqamaahRangeSchema), required=True)
    asr = fields.List(fields.Nested(IqamaahRangeSchema), required=True)
    isha = fields.List(fields.Nested(IqamaahRangeSchema), required=True)
    # Can have more than one Jumu'ah time and/or overlapping ranges
    jumuah = fields.List(fields.Nested(IqamaahRangeSchema), required=True)

    @pre_load
    def rewrite_legacy_keys(self, data, **kwargs):
        # Backward-compatible aliases: fajar, zuhr, jummah, jumu'ah
        if not isinstance(data, dict):
            return data
        return normalize_payload_aliases(data)

class IqamaahRangeCreateSchema(Schema):
    prayer = fields.Str(required=True)
    startDate = fields.Str(required=True)
    endDate = fields.Str(required=True)
    time = fields.Str(required=True)

class IqamaahRangeUpdateSchema(IqamaahRangeCreateSchema):
    """If any old* field is given, only the window with exactly those bounds (and oldTime) is replaced."""
    oldTime = fields.Str(load_default=None)
    oldStartDate = fields.Str(load_default=None)
    oldEndDate = fields.Str(load_default=None)

class IqamaahRangeDeleteSchema(Schema):
    prayer = fields.Str(required=True)
    startDate = fields.Str(required=True)
    endDate = fields.Str(required=True)
    # If provided, delete only windows with this time
    time = fields.Str(load_default=None)

class MonthQueryArgsSchema(Schema):
    year = fields.Int(required=True, validate=validate.Range(min=MIN_SCHEDULE_YEAR, max=MAX_SCHEDULE_YEAR))
    month = fields.Int(required=True, validate=validate.Range(min=1, max=12))

# --- Iqamaah Output Schemas ---

class IqamaahTimesSchema(Schema):
    fajr = fields.List(fields.Nested(IqamaahRangeSchema))
    dhuhr = fields.List(fields.Nested(IqamaahRangeSchema))
    asr = fields.List(fields.Nested(IqamaahRangeSchema))
    isha = fields.List(fields.Nested(IqamaahRangeSchema))
    jumuah = fields.List(fields.Nested(IqamaahRangeSchema))

class IqamaahTimesResponseSchema(Schema):
    data = fields.Nested(IqamaahTimesSchema, required=True)

class IqamaahDayRowSchema(Schema):
    date = fields.Str(required=True)
    fajr = fields.Str(required=True)
    dhuhr = fields.Str(required=True)
    asr = fields.Str(required=True)
    isha = fields.Str(required=True)
    jumuah = fields.List(fields.Str(), required=True)

class IqamaahMonthScheduleSchema(Schema):
    year = fields.Int(required=True)
    month = fields.Int(required=True)
    data = fields.List(fields.Nested(IqamaahDayRowSchema), required=True)

class IqamaahMonthRangesSchema(Schema):
    year = fields.Int(required=True)
    month = fields.Int(required=True)
    data = fields.Nested(IqamaahTimesSchema, required=True)
