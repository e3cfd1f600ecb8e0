"""Loader for Mitsuba-style XML scene files.

Supported elements, all direct children of <scene>:

    <sensor type="perspective">
        <float name="fov" value="60"/>
        <float name="nearClip" value="0.1"/>
        <float name="farClip" value="128"/>
        <transform name="toWorld">
            <lookat origin="0, 2, 3" target="0, 0, 0" up="0, 1, 0"/>
        </transform>
    </sensor>

    <emitter type="point">
        <point name="position" x="0" y="4" z="0"/>
        <rgb name="intensity" value="0.9, 0.9, 0.9"/>
    </emitter>

    <emitter type="constant">
        <rgb name="radiance" value="0.1, 0.1, 0.1"/>
    </emitter>

    <shape type="sphere">
        <transform name="toWorld"><translate x="0" y="1" z="0"/></transform>
        <float name="radius" value="1"/>
        <bsdf type="diffuse"><rgb name="reflectance" value="0.8, 0.2, 0.2"/></bsdf>
    </shape>

A sphere may give its center as <point name="center" .../> instead of a
translate. A <bsdf type="roughconductor"> or <bsdf type="conductor"> with a
specularReflectance makes a mirror. A sphere containing
<emitter type="area"> with a radiance becomes a SphereAreaLight instead of
geometry. <spectrum name="..." value="0.5"/> is accepted wherever an <rgb>
is, as a grey value.

Malformed or unsupported elements are logged and skipped; only an unreadable
document fails the whole load.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from src.pathy.scene.description import (
    CameraConfig,
    ConstantLight,
    Material,
    PointLight,
    Scene,
    SceneSphere,
    SphereAreaLight,
    Vec3,
)

logger = logging.getLogger(__name__)

# Point light intensity used when an emitter does not give one
DEFAULT_POINT_INTENSITY: Vec3 = (0.9, 0.9, 0.9)


class SceneLoadError(ValueError):
    """Raised when a scene document cannot be read at all."""


class _SkipElement(Exception):
    """Internal signal: the current element is malformed and is skipped."""


def _parse_triplet(text: str, what: str) -> Vec3:
    parts = [p for p in text.replace(",", " ").split() if p]
    try:
        values = [float(p) for p in parts]
    except ValueError as e:
        raise _SkipElement(f"failed to parse {what}: {text!r}") from e
    if len(values) == 1:
        return (values[0], values[0], values[0])
    if len(values) != 3:
        raise _SkipElement(f"failed to parse {what}: {text!r}")
    return (values[0], values[1], values[2])


def _parse_float(element: ET.Element, attribute: str, what: str) -> float:
    value = element.get(attribute)
    if value is None:
        raise _SkipElement(f"{what} is missing the {attribute!r} attribute")
    try:
        return float(value)
    except ValueError as e:
        raise _SkipElement(f"failed to parse {what}: {value!r}") from e


def _parse_xyz(element: ET.Element, what: str) -> Vec3:
    x = _parse_float(element, "x", what)
    y = _parse_float(element, "y", what)
    z = _parse_float(element, "z", what)
    return (x, y, z)


def _find_named(parent: ET.Element, tags: tuple[str, ...], name: str) -> ET.Element | None:
    for child in parent:
        if child.tag in tags and child.get("name") == name:
            return child
    return None


def _named_color(parent: ET.Element, name: str) -> Vec3 | None:
    element = _find_named(parent, ("rgb", "spectrum"), name)
    if element is None:
        return None
    value = element.get("value")
    if value is None:
        raise _SkipElement(f"<{element.tag} name={name!r}> has no value")
    return _parse_triplet(value, name)


def _named_float(parent: ET.Element, name: str) -> float | None:
    element = _find_named(parent, ("float",), name)
    if element is None:
        return None
    return _parse_float(element, "value", name)


def _parse_sensor(element: ET.Element) -> CameraConfig:
    if element.get("type") != "perspective":
        raise _SkipElement(f"sensor has unsupported type: {element.get('type')}")

    kwargs: dict[str, object] = {}
    fov = _named_float(element, "fov")
    if fov is not None:
        kwargs["vfov"] = fov
    near = _named_float(element, "nearClip")
    if near is not None:
        kwargs["near"] = near
    far = _named_float(element, "farClip")
    if far is not None:
        kwargs["far"] = far

    transform = element.find("transform")
    if transform is not None:
        lookat = transform.find("lookat")
        if lookat is None:
            raise _SkipElement("sensor transform is missing a lookat element")
        kwargs["eye"] = _parse_triplet(lookat.get("origin", ""), "lookat origin")
        kwargs["look_at"] = _parse_triplet(lookat.get("target", ""), "lookat target")
        if lookat.get("up") is not None:
            kwargs["up"] = _parse_triplet(lookat.get("up", ""), "lookat up")

    try:
        return CameraConfig(**kwargs)  # type: ignore[arg-type]
    except ValueError as e:
        raise _SkipElement(f"invalid sensor: {e}") from e


def _parse_emitter(element: ET.Element) -> PointLight | ConstantLight:
    emitter_type = element.get("type")

    if emitter_type == "point":
        position_element = _find_named(element, ("point",), "position")
        if position_element is None:
            raise _SkipElement("point emitter is missing a position")
        position = _parse_xyz(position_element, "point emitter position")
        intensity = _named_color(element, "intensity") or DEFAULT_POINT_INTENSITY
        return PointLight(position=position, intensity=intensity)

    if emitter_type == "constant":
        radiance = _named_color(element, "radiance")
        if radiance is None:
            raise _SkipElement("constant emitter is missing a radiance")
        return ConstantLight(radiance=radiance)

    raise _SkipElement(f"emitter has unsupported type: {emitter_type}")


def _parse_sphere_center(element: ET.Element) -> Vec3:
    center_element = _find_named(element, ("point",), "center")
    if center_element is not None:
        return _parse_xyz(center_element, "sphere center")

    transform = element.find("transform")
    if transform is None:
        raise _SkipElement("shape is missing a transform element")
    translate = transform.find("translate")
    if translate is None:
        raise _SkipElement("transform is missing translate element")
    return _parse_xyz(translate, "translate")


def _parse_material(bsdf: ET.Element) -> Material:
    bsdf_type = bsdf.get("type")

    if bsdf_type == "diffuse":
        reflectance = _named_color(bsdf, "reflectance")
        if reflectance is None:
            raise _SkipElement("diffuse is missing a rgb reflectance element")
        return Material(base_color=reflectance, is_mirror=False)

    if bsdf_type in ("roughconductor", "conductor"):
        specular = _named_color(bsdf, "specularReflectance")
        if specular is None:
            raise _SkipElement(f"{bsdf_type} is missing a rgb specularReflectance element")
        return Material(base_color=specular, is_mirror=True)

    raise _SkipElement(f"bsdf has unsupported type: {bsdf_type}")


def _parse_shape(element: ET.Element) -> SceneSphere | SphereAreaLight:
    if element.get("type") != "sphere":
        raise _SkipElement(f"shape has unsupported type: {element.get('type')}")

    center = _parse_sphere_center(element)
    radius = _named_float(element, "radius")
    if radius is None:
        raise _SkipElement("shape is missing a radius element")

    emitter = element.find("emitter")
    try:
        if emitter is not None:
            if emitter.get("type") != "area":
                raise _SkipElement(f"shape emitter has unsupported type: {emitter.get('type')}")
            radiance = _named_color(emitter, "radiance")
            if radiance is None:
                raise _SkipElement("area emitter is missing a radiance")
            return SphereAreaLight(position=center, radius=radius, intensity=radiance)

        bsdf = element.find("bsdf")
        if bsdf is None:
            raise _SkipElement("shape is missing a bsdf element.")
        return SceneSphere(center=center, radius=radius, material=_parse_material(bsdf))
    except ValueError as e:
        raise _SkipElement(f"invalid sphere: {e}") from e


def parse_scene(text: str, source: str = "<string>") -> Scene:
    """Build a Scene from an XML document.

    Args:
        text: The XML document.
        source: Name used in log and error messages.

    Returns:
        The parsed scene. Elements that could not be understood are left out.

    Raises:
        SceneLoadError: If the text is not XML or has no <scene> root.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise SceneLoadError(f"failed to parse {source}: {e}") from e

    if root.tag != "scene":
        raise SceneLoadError(f"the scene {source} is invalid: root element is <{root.tag}>")

    spheres: list[SceneSphere] = []
    point_lights: list[PointLight] = []
    area_lights: list[SphereAreaLight] = []
    constant_light = ConstantLight()
    camera = CameraConfig()

    for child in root:
        try:
            if child.tag == "sensor":
                camera = _parse_sensor(child)
            elif child.tag == "emitter":
                light = _parse_emitter(child)
                if isinstance(light, PointLight):
                    point_lights.append(light)
                else:
                    constant_light = light
            elif child.tag == "shape":
                shape = _parse_shape(child)
                if isinstance(shape, SphereAreaLight):
                    area_lights.append(shape)
                else:
                    spheres.append(shape)
            else:
                logger.warning("%s: ignoring unsupported element <%s>", source, child.tag)
        except (_SkipElement, ValueError) as e:
            logger.warning("%s: skipping <%s>: %s", source, child.tag, e)

    logger.debug(
        "Loaded %s: %d spheres, %d point lights, %d area lights",
        source,
        len(spheres),
        len(point_lights),
        len(area_lights),
    )

    return Scene(
        spheres=tuple(spheres),
        point_lights=tuple(point_lights),
        area_lights=tuple(area_lights),
        constant_light=constant_light,
        camera=camera,
    )


def load_scene(filepath: str | Path) -> Scene:
    """Read and parse a scene file.

    Raises:
        SceneLoadError: If the file cannot be read or parsed.
    """
    path = Path(filepath)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SceneLoadError(f"failed to open {path}: {e}") from e
    return parse_scene(text, source=str(path))
