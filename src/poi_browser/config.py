from __future__ import annotations

import os


DEFAULT_GEOCODER_URL = "https://api-adresse.data.gouv.fr/search/"
DEFAULT_USER_AGENT = os.environ.get(
    "POI_BROWSER_USER_AGENT", "poi-browser/0.1 (you@example.com)"
)
DEFAULT_TIMEOUT_S = 30

SETTLE_DEBOUNCE_S = 0.3
SEARCH_DEBOUNCE_S = 0.3
SELECTION_GRACE_S = 0.5
SEARCH_MIN_CHARS = 3
SEARCH_LIMIT = 5

FOCUS_ZOOM = 15
DEFAULT_CENTER = (43.675819, 7.289429)
DEFAULT_ZOOM = 13
DEFAULT_VIEWPORT_PX = (1024, 768)

DEMO_CITIES = [
    ("Nice", (43.70313, 7.26608)),
    ("Cannes", (43.55135, 7.01275)),
    ("Monaco", (43.73141, 7.42082)),
    ("Lyon", (45.75781, 4.83201)),
    ("Paris", (48.8566, 2.3522)),
    ("Marseille", (43.29695, 5.38107)),
]

DEMO_RESTAURANTS = [
    ("Le Réfectoire - 13 Solidaires", "171 Chem. de la Madrague-Ville, 13002 Marseille"),
    ("Le République", "1 Pl. Sadi-Carnot, 13002 Marseille"),
    ("Le plan de A à Z", "117 La Canebière, 13001 Marseille"),
    ("Le Restaurant De La Gaité", "35 Rue du Dr Léon Perrin, 13003 Marseille"),
    ("Restaurant Social Noga", "74 Cr Julien, 13006 Marseille"),
    ("L'Après M", "214 Chem. de Sainte-Marthe, 13014 Marseille"),
]
