from secret_santa.models.api.participants import Participant
from secret_santa.models.api.telegram import TelegramUpdate


class TestParticipant:
    """Unit tests for the Participant model."""

    def test_display_name_with_all_parts(self) -> None:
        participant = Participant(
            id=1, first_name="Ann", last_name="Lee", username="annlee"
        )
        assert participant.display_name == "Ann Lee @annlee"

    def test_display_name_skips_missing_parts(self) -> None:
        assert Participant(id=1, first_name="Ann").display_name == "Ann"
        assert Participant(id=1, username="ghost").display_name == "@ghost"

    def test_has_wish_list(self) -> None:
        assert Participant(id=1, wish_list="socks").has_wish_list
        assert not Participant(id=1, wish_list="").has_wish_list
        assert not Participant(id=1).has_wish_list


class TestTelegramUpdate:
    """Unit tests for Telegram payload parsing."""

    def test_parses_from_alias_and_ignores_extra_fields(self) -> None:
        update = TelegramUpdate.model_validate(
            {
                "update_id": 1,
                "message": {
                    "message_id": 2,
                    "date": 0,
                    "chat": {"id": -5, "type": "supergroup", "title": "Santas"},
                    "from": {"id": 9, "is_bot": False, "first_name": "Bo"},
                    "text": "hi",
                    "entities": [],
                },
            }
        )

        assert update.message is not None
        assert update.message.from_user is not None
        assert update.message.from_user.id == 9
        assert not update.message.is_private
