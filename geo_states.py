"""
geo_states.py — Rough state lookup for Venezuelan coordinates.

Each state is an axis-aligned box (min_lng, min_lat, max_lng, max_lat). Boxes
overlap, so the catalog is checked in order and the first hit wins. Small
states sit before the large boxes that swallow them: Distrito Capital and the
La Guaira coast before Miranda, Yaracuy before Falcón, Monagas and Bolívar
before Anzoátegui, Táchira and Mérida before Zulia, Apure after the Andes.
Every state capital resolves to its own state; border towns may not.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Region:
    name: str
    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float


UNKNOWN_STATE = "Otro"

VZLA_STATES = [
    Region("Distrito Capital", -67.0, 10.4, -66.8, 10.55),
    Region("La Guaira", -67.4, 10.56, -66.3, 10.7),
    Region("Miranda", -67.1, 10.0, -65.7, 10.6),
    Region("Bolívar", -67.0, 3.6, -60.0, 8.35),
    Region("Guárico", -68.0, 8.0, -65.3, 9.95),
    Region("Aragua", -67.9, 9.8, -66.9, 10.5),
    Region("Carabobo", -68.4, 9.8, -67.7, 10.5),
    Region("Táchira", -72.5, 7.3, -71.3, 8.6),
    Region("Mérida", -72.0, 7.8, -70.4, 9.3),
    Region("Zulia", -73.3, 8.3, -70.7, 11.9),
    Region("Lara", -70.8, 9.4, -68.9, 10.7),
    Region("Yaracuy", -69.2, 10.0, -68.3, 10.7),
    Region("Falcón", -71.3, 10.3, -68.2, 12.2),
    Region("Monagas", -63.9, 8.4, -62.2, 10.2),
    Region("Anzoátegui", -65.8, 7.6, -62.4, 10.2),
    Region("Nueva Esparta", -64.4, 10.8, -63.7, 11.1),
    Region("Cojedes", -68.9, 8.8, -67.9, 10.0),
    Region("Portuguesa", -70.0, 8.3, -68.7, 9.8),
    Region("Trujillo", -71.0, 8.9, -70.0, 10.0),
    Region("Barinas", -71.5, 7.6, -68.5, 9.2),
    Region("Apure", -72.4, 6.1, -66.3, 8.0),
    Region("Sucre", -64.5, 10.1, -61.8, 10.8),
    Region("Delta Amacuro", -62.5, 7.9, -59.8, 10.1),
    Region("Amazonas", -67.9, 0.6, -63.3, 6.3),
]


def resolve_state(lat, lng, regions=VZLA_STATES):
    """Return the name of the first region containing (lat, lng), or 'Otro'."""
    for region in regions:
        if (region.min_lng <= lng <= region.max_lng
                and region.min_lat <= lat <= region.max_lat):
            return region.name
    return UNKNOWN_STATE
