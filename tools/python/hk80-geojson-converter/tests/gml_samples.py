"""Builders for small CityGML documents in HK80 Grid coordinates."""

from __future__ import annotations

GML_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<core:CityModel xmlns:core="http://www.opengis.net/citygml/2.0" '
    'xmlns:gen="http://www.opengis.net/citygml/generics/2.0" '
    'xmlns:gml="http://www.opengis.net/gml">\n'
)
GML_FOOTER = "</core:CityModel>\n"


def city_object(attributes: list[tuple[str, str, str]], pos_lists: list[str]) -> str:
    """Render one ``GenericCityObject``.

    Args:
        attributes: ``(kind, name, value)`` triples, kind being one of
                    ``string``, ``int`` or ``double``.
        pos_lists: ``posList`` bodies; a ``"3|..."`` prefix sets srsDimension.
    """
    parts = ["  <core:cityObjectMember>\n    <gen:GenericCityObject>\n"]
    for kind, name, value in attributes:
        parts.append(
            f'      <gen:{kind}Attribute name="{name}">'
            f"<gen:value>{value}</gen:value></gen:{kind}Attribute>\n"
        )
    for body in pos_lists:
        dimension = "2"
        if "|" in body:
            dimension, body = body.split("|", 1)
        parts.append(
            "      <gen:lod1Geometry><gml:LineString>"
            f'<gml:posList srsDimension="{dimension}">{body}</gml:posList>'
            "</gml:LineString></gen:lod1Geometry>\n"
        )
    parts.append("    </gen:GenericCityObject>\n  </core:cityObjectMember>\n")
    return "".join(parts)


def gml_document(objects: list[str]) -> str:
    return GML_HEADER + "".join(objects) + GML_FOOTER
