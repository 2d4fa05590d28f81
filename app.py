import logging

import numpy as np
import streamlit as st
from PIL import Image
from pyrsistent import thaw

from grid_map_view.examples.synthetic import grid_map_message, radial_ramp
from grid_map_view.extension import GridMaps
from grid_map_view.surface import ImageSurface
from grid_map_view.utils.color import parse_color, rgba_to_css_string

TOPIC = "/elevation_map"
PREVIEW_SIZE = 480

logging.basicConfig(level=logging.INFO)

st.set_page_config(layout="wide", page_title="Grid Map View")


def get_extension() -> GridMaps:
    if "grid_maps" not in st.session_state:
        st.session_state["surface"] = ImageSurface()
        st.session_state["grid_maps"] = GridMaps(surface=st.session_state["surface"])
    return st.session_state["grid_maps"]


def color_section(label: str, key: str, current: str) -> str:
    r, g, b, a = parse_color(current)
    col1, col2 = st.columns([1, 2])
    with col1:
        hex_value: str = st.color_picker(
            label,
            f"#{round(r * 255):02x}{round(g * 255):02x}{round(b * 255):02x}",
            key=f"{key}_rgb",
        )
    with col2:
        alpha: float = st.slider("Alpha", 0.0, 1.0, a, step=0.05, key=f"{key}_alpha")
    pr, pg, pb, _ = parse_color(hex_value)
    return rgba_to_css_string((pr, pg, pb, alpha))


# --------- Main App ---------
grid_maps = get_extension()
surface: ImageSurface = st.session_state["surface"]
tab_view, tab_details = st.tabs(["View", "Details"])

with tab_view:
    left_col, right_col = st.columns([0.35, 0.65])

    with left_col:
        st.subheader("Grid")
        width: int = st.slider("Columns (Y)", 1, 200, 64, key="width")
        height: int = st.slider("Rows (X)", 1, 200, 48, key="height")
        resolution: float = st.number_input(
            "Resolution (m)", min_value=0.01, value=0.1, step=0.01, key="resolution"
        )
        unknown_fraction: float = st.slider("Unknown cells", 0.0, 0.5, 0.05, key="unknown")
        invalid_fraction: float = st.slider("Invalid cells", 0.0, 0.5, 0.02, key="invalid")
        seed: int = st.number_input("Random seed", min_value=0, value=0, key="seed")

        values = radial_ramp(width, height, unknown_fraction, invalid_fraction, seed)
        message = grid_map_message(
            {"elevation": values, "elevation_inverted": np.where(values >= 0, 100 - values, values)},
            resolution=resolution,
        )
        grid_maps.on_message(TOPIC, message)

        st.subheader("Colors")
        settings = grid_maps.settings.effective(TOPIC)
        layer: str = st.selectbox(
            "Layer", ["elevation", "elevation_inverted"], key="layer"
        )
        overrides = {
            "visible": True,
            "layer": layer,
            "min_color": color_section("Min", "min_color", settings.min_color),
            "max_color": color_section("Max", "max_color", settings.max_color),
            "unknown_color": color_section(
                "Unknown", "unknown_color", settings.unknown_color
            ),
            "invalid_color": color_section(
                "Invalid", "invalid_color", settings.invalid_color
            ),
        }
        grid_maps.on_settings_changed(TOPIC, overrides)

    with right_col:
        image = surface.images.get(TOPIC)
        if image is not None and image.width and image.height:
            scale = PREVIEW_SIZE / max(image.width, image.height)
            preview = image.resize(
                (round(image.width * scale), round(image.height * scale)),
                Image.Resampling.NEAREST,
            )
            st.image(preview)
        material = surface.materials.get(TOPIC)
        if material is not None:
            st.info(
                f"Transparent: {material.transparent} / depth write: {material.depth_write}",
                icon="🎨",
            )
        transform = grid_maps.get_transform(TOPIC)
        if transform is not None:
            st.info(f"Scale: {transform.scale} in frame '{transform.frame_id}'", icon="📐")
        errors = grid_maps.diagnostics.get(TOPIC)
        for code, text in errors.items():
            st.error(f"{code}: {text}")

with tab_details:
    st.json(thaw(grid_maps.details(TOPIC)), expanded=1)
    st.json(thaw(grid_maps.settings_nodes([TOPIC])), expanded=1)
