"""
Static venue coordinate table for NYC venues.

Shared by every source to resolve venue names to coordinates when the
listing carries no structured geo data. Keys are display names; lookups go
through the normalized key in VenueDirectory.
"""

from typing import Dict, Tuple

VENUE_MAP: Dict[str, Tuple[float, float]] = {
    # Bushwick / East Williamsburg
    'Nowadays': (40.7061, -73.9212),
    'Elsewhere': (40.7013, -73.9225),
    'Knockdown Center': (40.7150, -73.9135),
    'Brooklyn Mirage': (40.7060, -73.9225),
    'Avant Gardner': (40.7060, -73.9225),
    'The Brooklyn Mirage': (40.7060, -73.9225),
    'Jupiter Disco': (40.7013, -73.9207),
    'Bossa Nova Civic Club': (40.7065, -73.9214),
    'House of Yes': (40.7048, -73.9230),
    'Mood Ring': (40.7053, -73.9211),
    'Market Hotel': (40.7058, -73.9216),
    'Sustain': (40.7028, -73.9273),
    'H0L0': (40.7087, -73.9246),
    'Rubulad': (40.6960, -73.9270),
    'The Sultan Room': (40.7058, -73.9216),
    'The Meadows': (40.7058, -73.9216),
    'Signal': (40.7058, -73.9216),
    'Outer Heaven': (40.7058, -73.9216),
    'Pine Box Rock Shop': (40.7054, -73.9216),
    'Cobra Club': (40.7055, -73.9234),
    'Eris Main Stage': (40.7135, -73.9438),
    'Eris': (40.7135, -73.9438),

    # Williamsburg
    "Baby's All Right": (40.7095, -73.9591),
    'Mansions': (40.7112, -73.9565),
    'Superior Ingredients': (40.7119, -73.9538),
    'Purgatory': (40.7099, -73.9428),
    'Schimanski': (40.7115, -73.9618),
    'Rumi': (40.7243, -73.9543),
    'Brooklyn Steel': (40.7115, -73.9505),
    'Brooklyn Bowl': (40.7223, -73.9510),
    'Rough Trade NYC': (40.7220, -73.9508),
    'Music Hall of Williamsburg': (40.7111, -73.9607),
    'National Sawdust': (40.7116, -73.9625),
    "Pete's Candy Store": (40.7126, -73.9558),
    'Knitting Factory Brooklyn': (40.7112, -73.9604),
    'Sleepwalk': (40.7130, -73.9608),

    # Greenpoint
    'McCarren Parkhouse': (40.7206, -73.9515),
    'Good Room': (40.7268, -73.9516),
    'Lot Radio': (40.7116, -73.9383),
    'The Lot Radio': (40.7116, -73.9383),
    'Warsaw': (40.7291, -73.9510),
    'Saint Vitus': (40.7274, -73.9528),
    'Good Judy': (40.7301, -73.9518),
    'Greenpoint Terminal Market': (40.7360, -73.9580),
    'The Springs': (40.7240, -73.9500),
    'Archestratus': (40.7281, -73.9505),
    'Le Gamin': (40.7299, -73.9523),
    'Palace Cafe': (40.7287, -73.9520),
    'Troost': (40.7270, -73.9499),

    # Bed-Stuy
    'Ode to Babel': (40.6870, -73.9440),
    'Lovers Rock': (40.6863, -73.9523),
    'Bed-Vyne Brew': (40.6880, -73.9480),
    'Saraghina': (40.6870, -73.9350),
    'Do or Dive': (40.6890, -73.9530),
    'Dynaco': (40.6873, -73.9495),
    'Therapy Wine Bar': (40.6868, -73.9387),
    'Casablanca Cocktail Lounge': (40.6876, -73.9513),
    'Peaches HotHouse': (40.6886, -73.9487),
    "C'mon Everybody": (40.6883, -73.9535),

    # Upper West Side
    'Beacon Theatre': (40.7805, -73.9812),
    'Symphony Space': (40.7849, -73.9791),
    'Smoke Jazz Club': (40.8020, -73.9680),
    'Lincoln Center': (40.7725, -73.9835),
    'Jazz at Lincoln Center': (40.7686, -73.9832),
    'Lincoln Center Presents': (40.7725, -73.9835),
    'Film Society of Lincoln Center': (40.7725, -73.9835),
    'The Triad': (40.7805, -73.9810),
    'Gin Mill': (40.7834, -73.9787),
    'George Keeley': (40.7840, -73.9786),

    # West Village / Greenwich Village
    '154 Christopher St': (40.7331, -74.0045),
    'Smalls Jazz Club': (40.7346, -74.0027),
    'Village Vanguard': (40.7360, -74.0010),
    'Comedy Cellar': (40.7304, -74.0003),
    'Blue Note': (40.7310, -74.0001),
    'IFC Center': (40.7340, -74.0003),
    'Fat Cat': (40.7383, -74.0022),
    'The Bitter End': (40.7296, -73.9980),
    'Cafe Wha?': (40.7299, -74.0002),
    'Groove': (40.7336, -74.0010),
    'Terra Blues': (40.7299, -73.9976),
    '(Le) Poisson Rouge': (40.7296, -73.9993),
    'Le Poisson Rouge': (40.7296, -73.9993),
    'Zinc Bar': (40.7290, -73.9979),
    'Mezzrow': (40.7346, -74.0027),
    'The Stonewall Inn': (40.7338, -74.0020),

    # Chelsea / Meatpacking
    'Le Bain': (40.7408, -74.0078),
    'Cielo': (40.7410, -74.0056),
    'Marquee': (40.7475, -74.0010),

    # Lower East Side
    'Mercury Lounge': (40.7219, -73.9866),
    'Rockwood Music Hall': (40.7229, -73.9897),
    "Arlene's Grocery": (40.7207, -73.9884),
    'The Back Room': (40.7186, -73.9864),
    'Pianos': (40.7207, -73.9881),

    # East Village
    'Webster Hall': (40.7318, -73.9897),
    'The Parkside Lounge': (40.7228, -73.9845),
    'Nublu': (40.7241, -73.9818),
    'Drom': (40.7250, -73.9838),
    'Tompkins Square Park': (40.7265, -73.9817),
    'Niagara': (40.7249, -73.9829),
    'Club Cumming': (40.7233, -73.9849),
    'Village East by Angelika': (40.7313, -73.9874),
    'New York Public Library, Tompkins Square Branch': (40.7270, -73.9810),
    "The Alchemist's Kitchen Elixir Bar": (40.7245, -73.9914),

    # Flatiron / Union Square
    'Green Room NYC': (40.7424, -73.9927),
    'Paragon': (40.7187, -73.9904),
    'Irving Plaza': (40.7349, -73.9882),
    'Gramercy Theatre': (40.7348, -73.9863),
    'New York Comedy Club': (40.7394, -73.9819),
    "People's Improv Theater": (40.7400, -73.9849),

    # SoHo / NoHo
    "Joe's Pub": (40.7290, -73.9913),
    "SOB's": (40.7258, -74.0053),
    'Arlo Hotel Soho': (40.7265, -74.0073),

    # Midtown / Hell's Kitchen
    'Terminal 5': (40.7690, -73.9930),
    'Carnegie Hall': (40.7651, -73.9799),
    'Radio City Music Hall': (40.7600, -73.9800),
    'Town Hall': (40.7574, -73.9860),
    'The Cutting Room': (40.7477, -73.9826),
    'Madison Square Garden': (40.7505, -73.9934),
    'New York Comedy Club Midtown': (40.7638, -73.9882),
    'Arlo Hotel Midtown': (40.7562, -73.9931),
    'VERSA': (40.7495, -73.9913),
    'Pershing Square': (40.7520, -73.9774),
    'Brooklyn Delicatessen Times Square': (40.7580, -73.9855),

    # Cobble Hill / Brooklyn Heights / Boerum Hill
    'Jalopy Theatre': (40.6771, -74.0012),
    '61 Local': (40.6847, -73.9955),
    'Henry Public': (40.6880, -73.9940),
    'Floyd': (40.6860, -73.9930),
    "St. Ann's Warehouse": (40.7010, -73.9930),
    'St. Ann & the Holy Trinity Church': (40.6930, -73.9943),

    # Fort Greene / Clinton Hill
    'BAM': (40.6861, -73.9781),
    'BAM Howard Gilman Opera House': (40.6861, -73.9781),
    'BAM Harvey Theater': (40.6877, -73.9761),
    'BRIC': (40.6865, -73.9772),

    # Prospect Heights / Crown Heights
    'Brooklyn Museum': (40.6712, -73.9636),
    'Brooklyn Botanic Garden': (40.6694, -73.9625),

    # Gowanus / Park Slope
    'The Bell House': (40.6738, -73.9905),
    'Union Hall': (40.6741, -73.9789),
    'Barbes': (40.6727, -73.9789),
    'Littlefield': (40.6729, -73.9897),

    # Red Hook
    'Pioneer Works': (40.6785, -74.0138),
    "Sunny's Bar": (40.6771, -74.0098),

    # DUMBO
    'Basement': (40.7127, -73.9570),
    'Brooklyn Hangar': (40.6780, -73.9980),

    # Sunset Park
    'Industry City': (40.6553, -74.0069),
    'The Green-Wood Cemetery': (40.6584, -73.9944),
    'Green-Wood Cemetery': (40.6584, -73.9944),

    # Downtown Brooklyn
    'Public Records': (40.6807, -73.9576),
    'Quantum Brooklyn': (40.6888, -73.9785),
    'Under the K Bridge Park': (40.7032, -73.9887),

    # Harlem
    'Apollo Theater': (40.8099, -73.9500),
    'Silvana': (40.8097, -73.9497),
    'Shrine': (40.8138, -73.9515),
    "Minton's Playhouse": (40.8089, -73.9469),
    'Native Harlem': (40.8046, -73.9502),

    # Washington Heights
    'United Palace': (40.8399, -73.9395),

    # Astoria
    'QED Astoria': (40.7713, -73.9318),
    'Bohemian Hall & Beer Garden': (40.7624, -73.9186),
    'FD Photo Studio Astoria': (40.7700, -73.9230),

    # Long Island City
    'MoMA PS1': (40.7454, -73.9471),
    'Culture Lab LIC': (40.7440, -73.9485),
}
