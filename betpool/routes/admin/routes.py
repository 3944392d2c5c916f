import logging

from flask_login import current_user, login_required

from betpool.auth import admin_required
from betpool.errors import (
    IncompleteSubmission,
    InvalidRound,
    InvalidRoundSize,
    MultipleActiveRounds,
    NoActiveRound,
)
from betpool.forms.fields import first_error
from betpool.forms.bets import PREDICTION_FIELDS
from betpool.forms.rounds import GAME_SETUP_FIELDS, CompleteRoundForm, SaveRoundForm
from betpool.routes.admin import bp
from betpool.services import fixture_store, settlement
from betpool.utils.responses import envelope, json_body, list_field, pick_fields

logger = logging.getLogger(__name__)

NO_ACTIVE_ROUNDS_MESSAGE = "There are no active rounds at the moment"
MULTIPLE_ACTIVE_ROUNDS_MESSAGE = "More than one active round was found"


@bp.route("/all-teams")
@login_required
@admin_required
def all_teams():
    """Clubs available for round setup"""
    return envelope(True, "", fixture_store.list_teams())


@bp.route("/save-round", methods=["POST"])
@login_required
@admin_required
def save_round():
    """Open a new round of ten games"""
    payload = json_body()
    games = list_field(payload, "games")
    if len(games) != fixture_store.GAMES_PER_ROUND:
        raise InvalidRoundSize()

    form = SaveRoundForm(
        formdata=None,
        data={
            "round": payload.get("round"),
            "bets_accepted_by": payload.get("bets_accepted_by"),
            "games": pick_fields(games, GAME_SETUP_FIELDS),
        },
    )
    if not form.validate():
        raise InvalidRound(first_error(form))

    round_ = fixture_store.open_round(
        form.game_pairs(), form.deadline, number=form.round.data
    )
    logger.info(f"Admin {current_user.username} opened round {round_.number}")

    return envelope(
        True,
        f"Round {round_.number} saved successfully",
        round_.to_dict(),
    )


@bp.route("/get-active-round")
@login_required
@admin_required
def get_active_round():
    """Active round for result entry, regardless of the betting deadline"""
    try:
        round_ = fixture_store.get_active_round()
    except NoActiveRound:
        raise NoActiveRound(NO_ACTIVE_ROUNDS_MESSAGE)
    except MultipleActiveRounds as e:
        raise MultipleActiveRounds(count=e.count, message=MULTIPLE_ACTIVE_ROUNDS_MESSAGE)

    data = round_.to_dict()
    data["betting_open"] = fixture_store.is_betting_open(round_)
    return envelope(True, "", data)


@bp.route("/complete-round", methods=["POST"])
@login_required
@admin_required
def complete_round():
    """Enter official scores and settle the round"""
    payload = json_body()
    games = list_field(payload, "games")
    if len(games) != fixture_store.GAMES_PER_ROUND:
        raise IncompleteSubmission()

    form = CompleteRoundForm(
        formdata=None,
        data={
            "round_id": payload.get("round_id"),
            "games": pick_fields(games, PREDICTION_FIELDS),
        },
    )
    if not form.validate():
        logger.info(f"Rejected round results: {form.errors}")
        raise IncompleteSubmission()

    summary = settlement.settle_round(form.round_id.data, form.score_tuples())
    logger.info(
        f"Admin {current_user.username} completed round {summary.round_number}"
    )

    return envelope(
        True, "Round results submitted successfully", summary.to_dict()
    )
