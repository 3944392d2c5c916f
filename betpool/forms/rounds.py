from flask_wtf import FlaskForm
from wtforms import FieldList, Form, FormField, StringField
from wtforms.validators import DataRequired, NumberRange, ValidationError

from betpool.forms.bets import PredictionForm
from betpool.forms.fields import MAX_ID, StrictIntegerField
from betpool.utils.timezone_utils import parse_deadline

GAME_SETUP_FIELDS = ("home_team_id", "away_team_id")


class GameSetupForm(Form):
    home_team_id = StrictIntegerField(
        "Home team",
        validators=[NumberRange(min=1, max=MAX_ID, message="Both teams are required")],
    )
    away_team_id = StrictIntegerField(
        "Away team",
        validators=[NumberRange(min=1, max=MAX_ID, message="Both teams are required")],
    )

    def validate_away_team_id(self, field):
        if field.data is not None and field.data == self.home_team_id.data:
            raise ValidationError("A team cannot play against itself")


class SaveRoundForm(FlaskForm):
    """Admin setup of a new round"""

    class Meta:
        csrf = False

    round = StrictIntegerField("Round")
    bets_accepted_by = StringField(
        "Bets accepted by",
        validators=[DataRequired(message="The betting deadline is required")],
    )
    games = FieldList(FormField(GameSetupForm))

    def validate_round(self, field):
        if field.data is not None and not 1 <= field.data <= MAX_ID:
            raise ValidationError(f"Round numbers run from 1 to {MAX_ID}")

    def validate_bets_accepted_by(self, field):
        if parse_deadline(field.data) is None:
            raise ValidationError("The betting deadline is not a valid date")

    @property
    def deadline(self):
        return parse_deadline(self.bets_accepted_by.data)

    def game_pairs(self):
        return [
            (entry.form.home_team_id.data, entry.form.away_team_id.data)
            for entry in self.games
        ]


class CompleteRoundForm(FlaskForm):
    """Official final scores for the active round"""

    class Meta:
        csrf = False

    round_id = StrictIntegerField("Round", validators=[NumberRange(min=1, max=MAX_ID)])
    games = FieldList(FormField(PredictionForm))

    def score_tuples(self):
        return [entry.form.to_tuple() for entry in self.games]
