"""Tests for voice transcript interpretation."""

import pytest

from yafoy.utils.voice_commands import (
    HELP_MESSAGES,
    VoiceCommand,
    describe_speech_error,
    match_voice_command,
)


class TestMatchVoiceCommand:
    """Test the ordered command table."""

    def test_search_extracts_query(self):
        assert match_voice_command("rechercher tente blanche") == VoiceCommand("search", "tente blanche")

    def test_search_is_case_insensitive(self):
        assert match_voice_command("  Chercher Sonorisation ") == VoiceCommand("search", "sonorisation")

    def test_cancel_has_no_value(self):
        assert match_voice_command("annuler") == VoiceCommand("cancel", None)

    def test_unmatched_transcript_is_raw(self):
        assert match_voice_command("Bonjour tout le monde") == VoiceCommand("raw", "Bonjour tout le monde")

    def test_logout_wins_over_login(self):
        assert match_voice_command("déconnexion").action == "logout"
        assert match_voice_command("connexion").action == "login"

    @pytest.mark.parametrize(
        "transcript,action",
        [
            ("confirmer", "confirm"),
            ("valider", "confirm"),
            ("retour", "back"),
            ("accueil", "home"),
            ("aide", "help"),
            ("mes commandes", "orders"),
            ("mon compte", "account"),
            ("devenir prestataire", "become-provider"),
            ("ajouter un produit", "add-product"),
            ("commandes en attente", "provider-orders"),
            ("tableau de bord", "dashboard"),
            ("je veux m'inscrire", "signup"),
            ("créer un compte", "signup"),
        ],
    )
    def test_fixed_commands(self, transcript, action):
        assert match_voice_command(transcript).action == action

    def test_navigate_extracts_destination(self):
        assert match_voice_command("aller au catalogue") == VoiceCommand("navigate", "catalogue")

    def test_reserve_extracts_item(self):
        assert match_voice_command("réserver chaises") == VoiceCommand("reserve", "chaises")

    def test_navigation_keyword_fallback(self):
        assert match_voice_command("voir mes favoris") == VoiceCommand("navigate", "/client/favorites")


class TestSpeechErrors:
    def test_known_code(self):
        assert describe_speech_error("no-speech") == "Aucune parole détectée"

    def test_unknown_code(self):
        assert describe_speech_error("weird") == "Erreur: weird"

    def test_help_messages_present(self):
        assert any("Rechercher" in message for message in HELP_MESSAGES)
