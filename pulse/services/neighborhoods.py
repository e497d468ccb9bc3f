"""
NYC neighborhood reference data.

The neighborhood set is closed: every resolved event carries one of these
names or None. Boroughs are never neighborhoods.
"""

from typing import Dict, Optional

NEIGHBORHOODS: Dict[str, Dict] = {
    'East Village': {
        'lat': 40.7264, 'lng': -73.9818, 'radius_km': 0.8,
        'aliases': ['east village', 'ev', 'e village', 'e.v.', 'e.v'],
    },
    'West Village': {
        'lat': 40.7336, 'lng': -73.9999, 'radius_km': 0.7,
        'aliases': ['west village', 'wv', 'w village', 'the village'],
    },
    'Lower East Side': {
        'lat': 40.7150, 'lng': -73.9843, 'radius_km': 0.8,
        'aliases': ['lower east side', 'les', 'lower east', 'chinatown', 'little italy'],
    },
    'Williamsburg': {
        'lat': 40.7081, 'lng': -73.9571, 'radius_km': 1.2,
        'aliases': ['williamsburg', 'wburg', 'billyburg'],
    },
    'Bushwick': {
        'lat': 40.6944, 'lng': -73.9213, 'radius_km': 1.0,
        'aliases': ['bushwick', 'east williamsburg', 'east wburg', 'ridgewood'],
    },
    'Chelsea': {
        'lat': 40.7465, 'lng': -74.0014, 'radius_km': 0.8,
        'aliases': ['chelsea', 'meatpacking', 'meatpacking district'],
    },
    'SoHo': {
        'lat': 40.7233, 'lng': -73.9985, 'radius_km': 0.6,
        'aliases': ['soho', 'so ho', 'nolita'],
    },
    'NoHo': {
        'lat': 40.7290, 'lng': -73.9937, 'radius_km': 0.4,
        'aliases': ['noho', 'no ho'],
    },
    'Tribeca': {
        'lat': 40.7163, 'lng': -74.0086, 'radius_km': 0.6,
        'aliases': ['tribeca', 'tri beca'],
    },
    'Midtown': {
        'lat': 40.7549, 'lng': -73.9840, 'radius_km': 1.5,
        'aliases': ['midtown', 'midtown manhattan', 'times square', 'herald square', 'murray hill', 'kips bay'],
    },
    'Upper West Side': {
        'lat': 40.7870, 'lng': -73.9754, 'radius_km': 1.5,
        'aliases': ['upper west side', 'uws', 'upper west'],
    },
    'Upper East Side': {
        'lat': 40.7736, 'lng': -73.9566, 'radius_km': 1.5,
        'aliases': ['upper east side', 'ues', 'upper east'],
    },
    'Harlem': {
        'lat': 40.8116, 'lng': -73.9465, 'radius_km': 1.5,
        'aliases': ['harlem'],
    },
    'Astoria': {
        'lat': 40.7723, 'lng': -73.9301, 'radius_km': 1.2,
        'aliases': ['astoria'],
    },
    'Long Island City': {
        'lat': 40.7425, 'lng': -73.9561, 'radius_km': 1.0,
        'aliases': ['long island city', 'lic'],
    },
    'Greenpoint': {
        'lat': 40.7274, 'lng': -73.9514, 'radius_km': 0.8,
        'aliases': ['greenpoint', 'gpoint'],
    },
    'Park Slope': {
        'lat': 40.6710, 'lng': -73.9814, 'radius_km': 1.0,
        'aliases': ['park slope', 'south slope'],
    },
    'Downtown Brooklyn': {
        'lat': 40.6934, 'lng': -73.9867, 'radius_km': 0.8,
        'aliases': ['downtown brooklyn', 'downtown bk'],
    },
    'DUMBO': {
        'lat': 40.7033, 'lng': -73.9890, 'radius_km': 0.5,
        'aliases': ['dumbo'],
    },
    "Hell's Kitchen": {
        'lat': 40.7638, 'lng': -73.9918, 'radius_km': 0.8,
        'aliases': ["hell's kitchen", 'hells kitchen', 'hk', 'clinton'],
    },
    'Greenwich Village': {
        'lat': 40.7308, 'lng': -73.9973, 'radius_km': 0.7,
        'aliases': ['greenwich village', 'greenwich'],
    },
    'Flatiron': {
        'lat': 40.7395, 'lng': -73.9903, 'radius_km': 0.6,
        'aliases': ['flatiron', 'gramercy', 'union square', 'union sq'],
    },
    'Financial District': {
        'lat': 40.7075, 'lng': -74.0089, 'radius_km': 0.8,
        'aliases': ['financial district', 'fidi', 'wall street', 'downtown manhattan'],
    },
    'Crown Heights': {
        'lat': 40.6694, 'lng': -73.9422, 'radius_km': 1.2,
        'aliases': ['crown heights'],
    },
    'Bed-Stuy': {
        'lat': 40.6872, 'lng': -73.9418, 'radius_km': 1.2,
        'aliases': ['bed-stuy', 'bed stuy', 'bedford stuyvesant', 'bedstuy'],
    },
    'Fort Greene': {
        'lat': 40.6892, 'lng': -73.9742, 'radius_km': 0.8,
        'aliases': ['fort greene', 'clinton hill'],
    },
    'Prospect Heights': {
        'lat': 40.6775, 'lng': -73.9692, 'radius_km': 0.8,
        'aliases': ['prospect heights'],
    },
    'Cobble Hill': {
        'lat': 40.6860, 'lng': -73.9957, 'radius_km': 0.8,
        'aliases': ['cobble hill', 'boerum hill', 'carroll gardens'],
    },
    'Gowanus': {
        'lat': 40.6734, 'lng': -73.9880, 'radius_km': 0.8,
        'aliases': ['gowanus'],
    },
    'Red Hook': {
        'lat': 40.6734, 'lng': -74.0080, 'radius_km': 0.8,
        'aliases': ['red hook'],
    },
    'Sunset Park': {
        'lat': 40.6514, 'lng': -74.0027, 'radius_km': 1.2,
        'aliases': ['sunset park', 'industry city'],
    },
    'East Harlem': {
        'lat': 40.7957, 'lng': -73.9389, 'radius_km': 1.2,
        'aliases': ['east harlem', 'el barrio', 'spanish harlem'],
    },
    'Washington Heights': {
        'lat': 40.8417, 'lng': -73.9393, 'radius_km': 1.5,
        'aliases': ['washington heights', 'wash heights', 'the heights', 'inwood'],
    },
    'Jackson Heights': {
        'lat': 40.7557, 'lng': -73.8831, 'radius_km': 1.2,
        'aliases': ['jackson heights'],
    },
    'Flushing': {
        'lat': 40.7580, 'lng': -73.8317, 'radius_km': 1.5,
        'aliases': ['flushing', 'downtown flushing'],
    },
}

# alias (lowercase) -> canonical neighborhood name
ALIAS_MAP: Dict[str, str] = {}
for _name, _data in NEIGHBORHOODS.items():
    ALIAS_MAP[_name.lower()] = _name
    for _alias in _data['aliases']:
        ALIAS_MAP[_alias] = _name

# Bare borough / city names. A hint matching one of these is never specific
# enough to pick a neighborhood.
BOROUGH_NAMES = frozenset({
    'brooklyn', 'manhattan', 'queens', 'bronx', 'the bronx', 'staten island',
    'new york', 'new york city', 'new york (nyc)', 'nyc', 'new york, ny',
})

# Rough borough centroids, used as the expected point when sanity-checking
# geocoder results for events whose only hint is a borough.
BOROUGH_CENTROIDS: Dict[str, Dict[str, float]] = {
    'manhattan': {'lat': 40.7831, 'lng': -73.9712},
    'brooklyn': {'lat': 40.6782, 'lng': -73.9442},
    'queens': {'lat': 40.7282, 'lng': -73.7949},
    'bronx': {'lat': 40.8448, 'lng': -73.8648},
    'the bronx': {'lat': 40.8448, 'lng': -73.8648},
    'staten island': {'lat': 40.5795, 'lng': -74.1502},
}

NYC_CENTROID = {'lat': 40.7128, 'lng': -74.0060}

def match_alias(text: Optional[str]) -> Optional[str]:
    """Exact (case-insensitive) match of text against names and aliases."""
    if not text:
        return None
    return ALIAS_MAP.get(text.strip().lower())

def is_borough(text: Optional[str]) -> bool:
    if not text:
        return False
    return text.strip().lower() in BOROUGH_NAMES
