import logging

from flask import current_app
from flask_login import current_user, login_required

from betpool import limiter
from betpool.errors import IncompleteSubmission, MultipleActiveRounds, NoActiveRound
from betpool.forms.bets import PREDICTION_FIELDS, SubmitBetsForm
from betpool.routes.bets import bp
from betpool.services import bet_ledger
from betpool.services.fixture_store import GAMES_PER_ROUND
from betpool.utils.responses import envelope, json_body, list_field, pick_fields

logger = logging.getLogger(__name__)

SUBMITTED_MESSAGE = "Your bets have been successfully submitted"


@bp.route("/get-active-round")
@login_required
def get_active_round():
    """Active round with the caller's existing bets, while betting is open"""
    try:
        round_ = bet_ledger.get_open_round()
    except MultipleActiveRounds:
        # Bettors get the same answer for zero and several active rounds
        raise NoActiveRound()

    return envelope(True, "", bet_ledger.round_view_for_user(round_, current_user.id))


@bp.route("/submit", methods=["POST"])
@login_required
@limiter.limit(lambda: current_app.config["BET_SUBMIT_LIMIT"])
def submit():
    """Submit or replace the caller's ten predictions"""
    payload = json_body()
    predictions = list_field(payload, "predictions")
    if len(predictions) != GAMES_PER_ROUND:
        raise IncompleteSubmission()

    form = SubmitBetsForm(
        formdata=None,
        data={
            "round_id": payload.get("round_id"),
            "predictions": pick_fields(predictions, PREDICTION_FIELDS),
        },
    )
    if not form.validate():
        logger.info(f"Rejected bets from user {current_user.id}: {form.errors}")
        raise IncompleteSubmission()

    try:
        bets = bet_ledger.submit(
            current_user.id, form.round_id.data, form.prediction_tuples()
        )
    except MultipleActiveRounds:
        raise NoActiveRound()

    return envelope(True, SUBMITTED_MESSAGE, [bet.to_dict() for bet in bets])
