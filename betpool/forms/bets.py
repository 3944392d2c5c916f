from flask_wtf import FlaskForm
from wtforms import FieldList, Form, FormField
from wtforms.validators import NumberRange, ValidationError

from betpool.forms.fields import MAX_ID, StrictIntegerField
from betpool.utils.scoring import MAX_GOALS

PREDICTION_FIELDS = ("game_id", "home_goals", "away_goals")

GOALS_MESSAGE = f"Goals must be between 0 and {MAX_GOALS}"


class PredictionForm(Form):
    game_id = StrictIntegerField("Game", validators=[NumberRange(min=1, max=MAX_ID)])
    home_goals = StrictIntegerField(
        "Home goals",
        validators=[NumberRange(min=0, max=MAX_GOALS, message=GOALS_MESSAGE)],
    )
    away_goals = StrictIntegerField(
        "Away goals",
        validators=[NumberRange(min=0, max=MAX_GOALS, message=GOALS_MESSAGE)],
    )

    def to_tuple(self):
        return (self.game_id.data, self.home_goals.data, self.away_goals.data)


class SubmitBetsForm(FlaskForm):
    """Ten score predictions for the active round"""

    class Meta:
        csrf = False  # bearer-token API

    # Optional: defaults to the active round
    round_id = StrictIntegerField("Round")
    predictions = FieldList(FormField(PredictionForm))

    def validate_round_id(self, field):
        if field.data is not None and not 1 <= field.data <= MAX_ID:
            raise ValidationError("Unknown round")

    def prediction_tuples(self):
        return [entry.form.to_tuple() for entry in self.predictions]
