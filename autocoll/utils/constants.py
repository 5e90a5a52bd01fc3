"""
Constantes globales pour AutoColl.

Ce module contient les constantes utilisées dans l'application :
- Tags identifiant les collections gérées et auto-découvertes
- Articles initiaux ignorés lors de la détection de sagas
- Valeurs par défaut des motifs de nommage
"""

# Tag marqueur des collections gérées par AutoColl
MANAGED_COLLECTION_TAG = "Autocollection"

# Tag supplémentaire des collections issues de l'auto-découverte
AUTO_DISCOVERY_TAG = "AutoDiscovery"

# Nom d'une collection simple dont la chaîne de correspondance est vide
FALLBACK_COLLECTION_NAME = "Auto Collection"

# Articles initiaux retirés avant regroupement des sagas (anglais et allemand)
FRANCHISE_ARTICLES = ("The", "A", "An", "Der", "Die", "Das", "Ein", "Eine")

# Motifs de nommage par défaut de l'auto-découverte
DEFAULT_MOVIE_SERIES_PATTERN = "{Title} Collection"
DEFAULT_GENRE_PATTERN = "{Genre} Movies"
DEFAULT_STUDIO_PATTERN = "{Studio}"
DEFAULT_DECADE_PATTERN = "{Decade}s Movies"

# Nombre d'exemples journalisés par catégorie d'écart lors de la validation
DEFAULT_VALIDATION_SAMPLE_SIZE = 10
