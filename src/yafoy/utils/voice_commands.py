"""Mapping of French voice transcripts to assistant commands."""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class VoiceCommand:
    action: str
    value: str | None = None


@dataclass(frozen=True)
class CommandPattern:
    pattern: re.Pattern
    action: str
    extract: int | None = None


def _command(regex: str, action: str, extract: int | None = None) -> CommandPattern:
    return CommandPattern(re.compile(regex, re.IGNORECASE), action, extract)


# First match wins, so order matters: value-carrying commands come first.
VOICE_COMMANDS: list[CommandPattern] = [
    _command(r"rechercher?\s+(.+)", "search", 1),
    _command(r"chercher?\s+(.+)", "search", 1),
    _command(r"trouver?\s+(.+)", "search", 1),
    _command(r"aller?\s+(?:à|au|aux)?\s*(.+)", "navigate", 1),
    _command(r"ouvrir?\s+(.+)", "navigate", 1),
    _command(r"réserver?\s+(.+)", "reserve", 1),
    _command(r"commander?\s+(.+)", "order", 1),
    _command(r"confirmer", "confirm"),
    _command(r"valider", "confirm"),
    _command(r"annuler", "cancel"),
    _command(r"retour", "back"),
    _command(r"accueil", "home"),
    _command(r"aide", "help"),
    _command(r"stop", "stop"),
    _command(r"arrêter?", "stop"),
    _command(r"catalogue", "catalog"),
    _command(r"mes commandes", "orders"),
    _command(r"mon compte", "account"),
    _command(r"déconnexion", "logout"),
    _command(r"connexion", "login"),
    _command(r"comment ça marche", "how-it-works"),
    _command(r"devenir prestataire", "become-provider"),
    _command(r"prestataire", "become-provider"),
    # Provider commands
    _command(r"ajouter\s+(?:un\s+)?produit", "add-product"),
    _command(r"nouveau\s+produit", "add-product"),
    _command(r"mes\s+produits", "my-products"),
    _command(r"gérer\s+(?:mes\s+)?produits", "my-products"),
    _command(r"commandes\s+(?:en\s+)?attente", "provider-orders"),
    _command(r"paramètres", "settings"),
    _command(r"tableau\s+de\s+bord", "dashboard"),
    # Account commands
    _command(r"(?:je\s+veux\s+)?(?:m['’])?inscrire", "signup"),
    _command(r"créer\s+(?:un\s+)?compte", "signup"),
    _command(r"(?:me\s+)?connecter", "login"),
]

NAVIGATION_MAP: dict[str, str] = {
    "accueil": "/",
    "home": "/",
    "catalogue": "/client/catalog",
    "produits": "/client/catalog",
    "mes commandes": "/client/orders",
    "commandes": "/client/orders",
    "favoris": "/client/favorites",
    "compte": "/client/settings",
    "paramètres": "/client/settings",
    "connexion": "/auth",
    "login": "/auth",
    "comment ça marche": "/comment-ca-marche",
    "devenir prestataire": "/devenir-prestataire",
    "prestataire": "/devenir-prestataire",
    "mes produits": "/provider/products",
    "ajouter produit": "/provider/products",
    "tableau de bord": "/provider",
    "dashboard": "/provider",
}

HELP_MESSAGES = [
    'Dites "Rechercher" suivi de ce que vous cherchez',
    'Dites "Catalogue" pour voir les produits',
    'Dites "Comment ça marche" pour comprendre le fonctionnement',
    'Dites "Devenir prestataire" pour en savoir plus',
    'Dites "Mes commandes" pour voir vos commandes',
    'Dites "Ajouter produit" pour créer un nouveau produit',
    'Dites "Retour" pour revenir en arrière',
    'Dites "Aide" pour entendre ces instructions',
]

SPEECH_ERROR_MESSAGES: dict[str, str] = {
    "not-allowed": "Accès au microphone refusé",
    "no-speech": "Aucune parole détectée",
    "network": "Erreur réseau",
    "aborted": "Reconnaissance annulée",
    "audio-capture": "Pas de microphone détecté",
    "service-not-allowed": "Service non autorisé",
    "unsupported": "La reconnaissance vocale n'est pas disponible sur cet appareil",
}


def match_voice_command(transcript: str) -> VoiceCommand:
    """Map a transcript to a command.

    The lower-cased transcript is checked against VOICE_COMMANDS in order,
    then against navigation keywords. Anything else becomes a ``raw``
    command carrying the original text.
    """
    text = transcript.lower().strip()

    for command in VOICE_COMMANDS:
        match = command.pattern.search(text)
        if match:
            value = match.group(command.extract).strip() if command.extract is not None else None
            return VoiceCommand(action=command.action, value=value)

    for keyword, path in NAVIGATION_MAP.items():
        if keyword in text:
            return VoiceCommand(action="navigate", value=path)

    return VoiceCommand(action="raw", value=transcript)


def describe_speech_error(code: str) -> str:
    return SPEECH_ERROR_MESSAGES.get(code, f"Erreur: {code}")
