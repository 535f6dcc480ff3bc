import numpy as np
import pytest

from mini_fair import fair
from mini_fair.generative import GridParams, generate_grid, bump
from mini_fair.viz import create_surface_figure, plot_surface_3d


@pytest.fixture
def faired():
    mesh = generate_grid(GridParams(nx=4, ny=4))
    bump(mesh, [12], 0.5)
    before = mesh.points.copy()
    result = fair(mesh, 1)
    return mesh, result, before


def test_figure_traces(faired):
    mesh, result, _ = faired
    fig = create_surface_figure(mesh, locked=result.locked, title="Faired")
    names = [trace.name for trace in fig.data]
    assert names == ['Surface', 'Edges', 'Vertices']
    assert len(fig.data[0].i) == mesh.n_faces


@pytest.mark.parametrize("color_by", ['none', 'height', 'displacement'])
def test_color_modes(faired, color_by):
    mesh, _, before = faired
    fig = create_surface_figure(mesh, reference=before, color_by=color_by,
                                show_edges=False, show_vertices=False)
    assert len(fig.data) == 1


def test_displacement_needs_reference(faired):
    mesh, _, _ = faired
    with pytest.raises(ValueError):
        create_surface_figure(mesh, color_by='displacement')


def test_plot_writes_html(faired, tmp_path):
    mesh, result, _ = faired
    out = tmp_path / "surface.html"
    plot_surface_3d(mesh, locked=result.locked, outpath=str(out), show=False)
    assert out.exists()
