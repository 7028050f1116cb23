"""
Curated catalog of US lakes and reservoirs with USGS water level stations.
"""

from typing import Dict, List, Optional

from .models import Lake


class LakeCatalog:
    """Static, read-only list of lakes with search and grouping helpers."""

    lakes: List[Lake] = [
        # Southeast - South Carolina
        Lake("02166500", "Lake Greenwood", "SC", 34.1732, -82.1137),
        Lake("02169500", "Lake Murray", "SC", 34.0454, -81.2182),
        # Southeast - North Carolina
        Lake("02077280", "Hyco Lake", "NC", 36.4092, -79.0472),
        Lake("02091500", "Falls Lake", "NC", 35.9551, -78.5814),
        Lake("0208458892", "Lake Mattamuskeet", "NC", 35.4685, -76.2094),
        # Southeast - Georgia / Alabama
        Lake("02344700", "West Point Lake", "GA", 32.9101, -85.1830),
        Lake("02342500", "Lake Harding", "GA", 32.7254, -85.0991),
        Lake("02382200", "Lake Allatoona", "GA", 34.1551, -84.7238),
        Lake("02387500", "Lake Weiss", "AL", 34.1465, -85.6127),
        # Florida
        Lake("02266300", "Lake Tohopekaliga", "FL", 28.2361, -81.3878),
        Lake("02270500", "Lake Okeechobee", "FL", 26.9534, -80.7914),
        # Tennessee Valley
        Lake("03571000", "Chickamauga Lake", "TN", 35.2023, -85.1269),
        Lake("03524000", "Cherokee Lake", "TN", 36.2015, -83.2568),
        Lake("07027000", "Reelfoot Lake", "TN", 36.3504, -89.4131),
        # Texas
        Lake("08051100", "Lake Ray Roberts", "TX", 33.3529, -97.0503),
        Lake("08049500", "Lake Lewisville", "TX", 33.0712, -96.9753),
        Lake("08064100", "Lake Livingston", "TX", 30.7093, -95.0008),
        Lake("08123800", "Lake J.B. Thomas", "TX", 32.6149, -101.2228),
        Lake("07227900", "Lake Meredith", "TX", 35.5789, -101.5678),
        Lake("07312000", "Lake Kemp", "TX", 33.7545, -99.1489),
        Lake("07332610", "Lake Bonham", "TX", 33.6287, -96.1789),
        # Northeast
        Lake("04249000", "Lake Ontario at Oswego", "NY", 43.4653, -76.5119),
        Lake("04294500", "Lake Champlain", "VT", 44.4759, -73.2207),
        # Midwest
        Lake("04085200", "Lake Winnebago", "WI", 44.0028, -88.4262),
        Lake("04176500", "Lake Erie at Monroe", "MI", 41.8981, -83.3777),
        # West - Utah/Nevada/Arizona
        Lake("09380000", "Lake Powell", "UT", 37.0689, -111.2558),
        Lake("09421500", "Lake Mead", "NV", 36.0160, -114.7377),
        Lake("09384600", "Lyman Lake", "AZ", 34.3481, -109.3531),
        # West - California
        Lake("11370500", "Shasta Lake", "CA", 40.7179, -122.4194),
        Lake("11450000", "Clear Lake", "CA", 39.0335, -122.8347),
        Lake("10336645", "Lake Tahoe", "CA", 39.0968, -120.0324),
        # Pacific Northwest
        Lake("12472800", "Banks Lake", "WA", 47.8665, -119.1578),
        Lake("14210000", "Bonneville Pool", "OR", 45.6387, -121.9406),
    ]

    @classmethod
    def lakes_by_state(cls) -> Dict[str, List[Lake]]:
        grouped: Dict[str, List[Lake]] = {}
        for lake in cls.lakes:
            grouped.setdefault(lake.state, []).append(lake)
        return grouped

    @classmethod
    def states(cls) -> List[str]:
        return sorted({lake.state for lake in cls.lakes})

    @classmethod
    def search(cls, query: str) -> List[Lake]:
        """Case-insensitive substring match on name or state; empty query returns all."""
        if not query:
            return list(cls.lakes)
        needle = query.lower()
        return [
            lake
            for lake in cls.lakes
            if needle in lake.name.lower() or needle in lake.state.lower()
        ]

    @classmethod
    def lake_by_id(cls, lake_id: str) -> Optional[Lake]:
        for lake in cls.lakes:
            if lake.id == lake_id:
                return lake
        return None
