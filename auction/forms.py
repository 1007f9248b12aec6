# auction/forms.py - request validation for the JSON endpoints
from django import forms

from .models import AuctionState, Player, Team, User


class LoginForm(forms.Form):
    username = forms.CharField(max_length=150)
    password = forms.CharField(max_length=128)


class BidForm(forms.Form):
    amount = forms.IntegerField(
        min_value=1,
        error_messages={'required': 'Invalid bid amount', 'min_value': 'Invalid bid amount'}
    )


class AdminBidForm(BidForm):
    team_id = forms.IntegerField(error_messages={'required': 'Invalid team ID or bid amount'})


class LoadPlayerForm(forms.Form):
    player_id = forms.IntegerField(error_messages={'required': 'Player ID is required'})


class MarkPlayerForm(forms.Form):
    player_id = forms.IntegerField(error_messages={'required': 'Player ID is required'})
    status = forms.ChoiceField(
        choices=[(Player.SOLD, 'Sold'), (Player.UNSOLD, 'Unsold')],
        error_messages={'invalid_choice': 'Invalid status', 'required': 'Invalid status'}
    )
    sold_price = forms.IntegerField(required=False, min_value=0)
    sold_to_team = forms.IntegerField(required=False)


class AuctionStatusForm(forms.Form):
    status = forms.ChoiceField(
        choices=AuctionState.AUCTION_STATUS,
        error_messages={'invalid_choice': 'Invalid status', 'required': 'Invalid status'}
    )


class LockForm(forms.Form):
    locked = forms.BooleanField(required=False)


class EnforceMaxBidForm(forms.Form):
    enforce_max_bid = forms.BooleanField(required=False)


class MaxPlayersForm(forms.Form):
    max_players_per_team = forms.IntegerField(
        min_value=1,
        max_value=50,
        error_messages={
            'required': 'Invalid max players per team (must be between 1 and 50)',
            'min_value': 'Invalid max players per team (must be between 1 and 50)',
            'max_value': 'Invalid max players per team (must be between 1 and 50)',
        }
    )


class BidIncrementsForm(forms.Form):
    increment1 = forms.IntegerField(min_value=1)
    increment2 = forms.IntegerField(min_value=1)


class PlayerForm(forms.ModelForm):
    class Meta:
        model = Player
        fields = ['name', 'image', 'role', 'country', 'age', 'base_price', 'serial_number']
        error_messages = {
            'name': {'required': 'Name, role, and base_price are required'},
            'role': {'required': 'Name, role, and base_price are required'},
            'base_price': {'required': 'Name, role, and base_price are required'},
        }


class TeamForm(forms.ModelForm):
    class Meta:
        model = Team
        fields = ['name', 'owner_name', 'logo', 'budget']


class TeamCreationForm(TeamForm):
    username = forms.CharField(max_length=150)
    password = forms.CharField(max_length=128, min_length=4)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['budget'].required = False


class TeamBudgetForm(forms.Form):
    budget = forms.IntegerField(min_value=0, error_messages={'min_value': 'Budget cannot be negative'})


class CredentialsForm(forms.Form):
    username = forms.CharField(max_length=150)
    password = forms.CharField(max_length=128, min_length=4)


class StaffCredentialsForm(forms.Form):
    target_role = forms.ChoiceField(
        choices=[(User.ADMIN, 'Administrator'), (User.HOST, 'Host')],
        error_messages={
            'required': 'Invalid target role. Must be admin or host.',
            'invalid_choice': 'Invalid target role. Must be admin or host.',
        }
    )
    new_username = forms.CharField(
        max_length=150,
        error_messages={'required': 'Username and password are required'}
    )
    new_password = forms.CharField(
        max_length=128,
        error_messages={'required': 'Username and password are required'}
    )


def first_error(form):
    """First validation message of a bound form, for the JSON error body"""
    for errors in form.errors.values():
        if errors:
            return errors[0]
    return 'Invalid request'
