from flask import Blueprint, current_app, jsonify, request

from line_dashboard.analysis.downtime import DowntimeAnalyzer
from line_dashboard.domain.classifier import StopClassifier
from line_dashboard.domain.filters import CauseFilter, DateRange, StopFilter, parse_page
from line_dashboard.domain.time_utils import parse_shift
from line_dashboard.errors import ValidationError
from line_dashboard.models import MeterageEntry, SpeedSample
from line_dashboard.repositories import CauseRepository, SampleRepository, StopRepository
from line_dashboard.services.causes import CauseService
from line_dashboard.services.samples import MeterageService, SpeedService
from line_dashboard.services.stops import StopService

api = Blueprint("api", __name__, url_prefix="/api")


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def _cause_service():
    return CauseService(
        CauseRepository(),
        reserved_code=current_app.extensions["classification_policy"].non_considered_cause_code
    )


def _stop_service():
    classifier = StopClassifier(current_app.extensions["classification_policy"])
    return StopService(classifier, StopRepository(), CauseRepository())


def _analyzer():
    return DowntimeAnalyzer(
        StopRepository(),
        CauseRepository(),
        open_stops=current_app.extensions["open_stop_policy"],
        shift_seconds=current_app.config["SHIFT_SECONDS"]
    )


def _meterage_service():
    return MeterageService(SampleRepository(MeterageEntry), current_app.config["NOTE_MAX_LENGTH"])


def _speed_service():
    return SpeedService(SampleRepository(SpeedSample), current_app.config["NOTE_MAX_LENGTH"])


# =============================
# Causes
# =============================

@api.route("/causes", methods=["POST"])
def create_cause():
    cause = _cause_service().create_cause(_json_body())
    return jsonify(cause.to_dict()), 201


@api.route("/causes", methods=["GET"])
def list_causes():
    cause_filter = CauseFilter.from_args(request.args, current_app.config["CAUSES_PAGE_LIMIT"])
    return jsonify(_cause_service().list_causes(cause_filter))


@api.route("/causes/<int:cause_id>", methods=["GET"])
def get_cause(cause_id):
    return jsonify(_cause_service().get_cause(cause_id).to_dict())


@api.route("/causes/<int:cause_id>", methods=["PATCH"])
def update_cause(cause_id):
    cause = _cause_service().update_cause(cause_id, _json_body())
    return jsonify(cause.to_dict())


# =============================
# Stops
# =============================

@api.route("/stops", methods=["POST"])
def create_stop():
    stop = _stop_service().create_stop(_json_body())
    return jsonify(stop.to_dict()), 201


@api.route("/stops", methods=["GET"])
def list_stops():
    stop_filter = StopFilter.from_args(
        request.args,
        default_limit=current_app.config["STOPS_PAGE_LIMIT"],
        max_limit=current_app.config["STOPS_MAX_LIMIT"]
    )
    return jsonify(_stop_service().list_stops(stop_filter))


@api.route("/stops/<int:stop_id>", methods=["GET"])
def get_stop(stop_id):
    return jsonify(_stop_service().get_stop(stop_id).to_dict())


@api.route("/stops/<int:stop_id>", methods=["PATCH"])
def update_stop(stop_id):
    stop = _stop_service().update_stop(stop_id, _json_body())
    return jsonify(stop.to_dict())


@api.route("/stops/analytics/downtime", methods=["GET"])
def downtime_by_cause():
    """
    Total downtime per cause

    Query params:
        - from, to: inclusive YYYY-MM-DD range
        - shift: 1, 2 or 3
    """
    date_range = DateRange.from_args(request.args)
    shift = parse_shift(request.args.get("shift"))
    return jsonify(_analyzer().downtime_by_cause(date_range, shift))


@api.route("/stops/analytics/daily", methods=["GET"])
def daily_summary():
    """Per-day stop count, downtime, TRS downtime and capped work time"""
    date_range = DateRange.from_args(request.args)
    shift = parse_shift(request.args.get("shift"))
    return jsonify(_analyzer().daily_summary(date_range, shift))


# =============================
# Meterage
# =============================

@api.route("/metrage", methods=["POST"])
def create_meterage():
    entry = _meterage_service().create(_json_body())
    return jsonify(entry.to_dict()), 201


@api.route("/metrage/daily", methods=["GET"])
def meterage_daily():
    return jsonify(_meterage_service().daily_series(DateRange.from_args(request.args)))


@api.route("/metrage/total", methods=["GET"])
def meterage_total():
    return jsonify(_meterage_service().total(DateRange.from_args(request.args)))


# =============================
# Speed
# =============================

@api.route("/speed", methods=["POST"])
def create_speed_sample():
    sample = _speed_service().create(_json_body())
    return jsonify(sample.to_dict()), 201


@api.route("/speed", methods=["GET"])
def list_speed_samples():
    date_range = DateRange.from_args(request.args)
    page, limit = parse_page(
        request.args, current_app.config["SAMPLES_PAGE_LIMIT"], current_app.config["SAMPLES_MAX_LIMIT"]
    )
    return jsonify(_speed_service().list(date_range, page, limit))


@api.route("/speed/daily", methods=["GET"])
def speed_daily():
    return jsonify(_speed_service().daily_series(DateRange.from_args(request.args)))


@api.route("/speed/summary", methods=["GET"])
def speed_summary():
    return jsonify(_speed_service().summary(DateRange.from_args(request.args)))
