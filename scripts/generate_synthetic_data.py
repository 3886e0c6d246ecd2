import argparse
import os
import sys

# Add project root to path so we can import from src
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.mesh import HalfEdgeMesh, cube_soup, grid_soup, tetrahedron_soup
from src.mesh.conversion import save_halfedge_mesh


def save_synthetic_data(output_dir, grid_size=15, bump_height=2.0, noise_level=0.05, seed=0):
    """Generate and save synthetic demo meshes."""
    os.makedirs(output_dir, exist_ok=True)

    # 1. Closed tetrahedron
    print("Generating Tetrahedron...")
    verts, faces = tetrahedron_soup()
    save_halfedge_mesh(HalfEdgeMesh.from_polygon_soup(verts, faces),
                       os.path.join(output_dir, "tetrahedron.vtk"))

    # 2. Quad cube
    print("Generating Cube...")
    verts, faces = cube_soup()
    save_halfedge_mesh(HalfEdgeMesh.from_polygon_soup(verts, faces),
                       os.path.join(output_dir, "cube.vtk"))

    # 3. Open grid with a centre bump and z noise
    print("Generating Bumpy Grid...")
    verts, faces = grid_soup(grid_size, bump_height=bump_height, noise=noise_level, seed=seed)
    save_halfedge_mesh(HalfEdgeMesh.from_polygon_soup(verts, faces),
                       os.path.join(output_dir, "bumpy_grid.vtk"))

    print(f"Synthetic data saved to {output_dir}")


def main(argv=None):
    parser = argparse.ArgumentParser(description='Write synthetic demo meshes')
    parser.add_argument('--output-dir', default='data/synthetic', help='Destination directory')
    parser.add_argument('--grid-size', type=int, default=15, help='Grid vertices per side')
    parser.add_argument('--bump-height', type=float, default=2.0, help='Height of the centre bump')
    parser.add_argument('--noise', type=float, default=0.05, help='Std-dev of z noise on the grid')
    parser.add_argument('--seed', type=int, default=0)
    args = parser.parse_args(argv)

    save_synthetic_data(args.output_dir, args.grid_size, args.bump_height, args.noise, args.seed)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
