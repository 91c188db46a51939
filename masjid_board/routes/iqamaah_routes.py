# masjid_board/routes/iqamaah_routes.py

from flask import current_app
from flask_smorest import Blueprint, abort

from ..extensions import limiter
from ..schemas import (
    MessageSchema,
    IqamaahTimesPayloadSchema,
    IqamaahTimesResponseSchema,
    IqamaahRangeCreateSchema,
    IqamaahRangeUpdateSchema,
    IqamaahRangeDeleteSchema,
    MonthQueryArgsSchema,
    IqamaahMonthScheduleSchema,
    IqamaahMonthRangesSchema,
)
from ..services import iqamaah_service
from ..services.iqamaah.errors import IqamaahError, StorageError

iqamaah_bp = Blueprint(
    'Iqamaah',
    __name__,
    url_prefix='/api/iqamaah',
    description="Iqamaah (congregation) time windows shown on the board."
)

# Reads are exempt from the default limits: display boards poll them all day.
MUTATION_LIMIT = "60 per minute"


def _abort_with(error):
    """Translates an engine error into an HTTP error response."""
    if isinstance(error, StorageError):
        current_app.logger.error(f"Iqamaah storage failure: {error}")
    else:
        current_app.logger.warning(f"Iqamaah request rejected: {error}")
    abort(error.http_status, message=str(error))


@iqamaah_bp.route('', methods=['PUT'])
@limiter.limit(MUTATION_LIMIT)
@iqamaah_bp.arguments(IqamaahTimesPayloadSchema)
@iqamaah_bp.response(200, IqamaahTimesResponseSchema, description="All windows were replaced.")
@iqamaah_bp.alt_response(400, schema=MessageSchema, description="A window is malformed.")
def replace_all(payload):
    """
    Replace every prayer's windows.

    The stored windows of each prayer are overwritten with the submitted ones.
    Windows that already ended are dropped.
    """
    try:
        aggregate = iqamaah_service.bulk_replace_iqamaah_times(payload)
    except IqamaahError as e:
        _abort_with(e)
    return {"data": aggregate.to_dict()}

@iqamaah_bp.route('', methods=['GET'])
@limiter.exempt
@iqamaah_bp.response(200, IqamaahTimesResponseSchema, description="The stored windows.")
@iqamaah_bp.alt_response(404, schema=MessageSchema, description="Nothing has been stored yet.")
def get_all():
    """Get the stored windows of every prayer."""
    try:
        aggregate = iqamaah_service.get_iqamaah_times()
    except IqamaahError as e:
        _abort_with(e)
    return {"data": aggregate.to_dict()}

@iqamaah_bp.route('', methods=['DELETE'])
@limiter.limit(MUTATION_LIMIT)
@iqamaah_bp.response(200, MessageSchema, description="All Iqamaah times were deleted.")
@iqamaah_bp.alt_response(404, schema=MessageSchema, description="Nothing has been stored yet.")
def clear_all():
    """Delete every stored window."""
    try:
        iqamaah_service.clear_iqamaah_times()
    except IqamaahError as e:
        _abort_with(e)
    return {"message": "Iqamaah times deleted."}

@iqamaah_bp.route('/range', methods=['POST'])
@limiter.limit(MUTATION_LIMIT)
@iqamaah_bp.arguments(IqamaahRangeCreateSchema)
@iqamaah_bp.response(200, IqamaahTimesResponseSchema, description="The window was inserted.")
@iqamaah_bp.alt_response(400, schema=MessageSchema, description="The window is malformed.")
def create_range(args):
    """
    Insert one window.

    For Fajr, Dhuhr, Asr and Isha the new window overrides any days it shares
    with existing windows. Jumuah windows are added alongside existing ones.
    """
    try:
        aggregate = iqamaah_service.create_iqamaah_range(
            args['prayer'], args['startDate'], args['endDate'], args['time']
        )
    except IqamaahError as e:
        _abort_with(e)
    return {"data": aggregate.to_dict()}

@iqamaah_bp.route('/range', methods=['PATCH'])
@limiter.limit(MUTATION_LIMIT)
@iqamaah_bp.arguments(IqamaahRangeUpdateSchema)
@iqamaah_bp.response(200, IqamaahTimesResponseSchema, description="The window was replaced.")
@iqamaah_bp.alt_response(400, schema=MessageSchema, description="The window is malformed.")
@iqamaah_bp.alt_response(404, schema=MessageSchema, description="Nothing has been stored yet.")
def update_range(args):
    """
    Replace one window.

    Send oldStartDate/oldEndDate (and optionally oldTime) to replace exactly
    that window. Without them, the window covering the new startDate is replaced.
    """
    try:
        aggregate = iqamaah_service.update_iqamaah_range(
            args['prayer'], args['startDate'], args['endDate'], args['time'],
            old_time=args.get('oldTime'),
            old_start_date=args.get('oldStartDate'),
            old_end_date=args.get('oldEndDate'),
        )
    except IqamaahError as e:
        _abort_with(e)
    return {"data": aggregate.to_dict()}

@iqamaah_bp.route('/range', methods=['DELETE'])
@limiter.limit(MUTATION_LIMIT)
@iqamaah_bp.arguments(IqamaahRangeDeleteSchema)
@iqamaah_bp.response(200, IqamaahTimesResponseSchema, description="The days were removed.")
@iqamaah_bp.alt_response(400, schema=MessageSchema, description="The range is malformed.")
@iqamaah_bp.alt_response(404, schema=MessageSchema, description="Nothing has been stored yet.")
def delete_range(args):
    """Remove a span of days from a prayer's windows, optionally only those with a given time."""
    try:
        aggregate = iqamaah_service.delete_iqamaah_range(
            args['prayer'], args['startDate'], args['endDate'], time=args.get('time')
        )
    except IqamaahError as e:
        _abort_with(e)
    return {"data": aggregate.to_dict()}

@iqamaah_bp.route('/month', methods=['GET'])
@limiter.exempt
@iqamaah_bp.arguments(MonthQueryArgsSchema, location='query')
@iqamaah_bp.response(200, IqamaahMonthScheduleSchema, description="One row per day of the month.")
def month_schedule(args):
    """Get the resolved Iqamaah time of every prayer for each day of a month."""
    try:
        return iqamaah_service.get_month_schedule(args['year'], args['month'])
    except IqamaahError as e:
        _abort_with(e)

@iqamaah_bp.route('/month/ranges', methods=['GET'])
@limiter.exempt
@iqamaah_bp.arguments(MonthQueryArgsSchema, location='query')
@iqamaah_bp.response(200, IqamaahMonthRangesSchema, description="Windows clipped to the month.")
def month_ranges(args):
    """Get every prayer's windows clipped to a month, for clients that draw ranges."""
    try:
        return iqamaah_service.get_month_ranges(args['year'], args['month'])
    except IqamaahError as e:
        _abort_with(e)
