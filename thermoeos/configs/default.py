"""Module to config solvers and database locations"""

import os.path as osp

import ml_collections


def get_config():
    """Get the default solver and database configuration."""
    config = ml_collections.ConfigDict()

    # Parameter database.
    config.database_dir = osp.join(osp.dirname(osp.dirname(__file__)), "database")
    config.verbose = False

    # Nonlinear solvers (scipy.optimize.root).
    config.solver = ml_collections.ConfigDict()
    config.solver.method = "hybr"
    config.solver.atol = 1e-8
    config.solver.rtol = 1e-12
    config.solver.max_iters = 100

    # Volume solver.
    config.volume = ml_collections.ConfigDict()
    config.volume.max_iters = 100
    config.volume.rtol = 1e-12

    # Saturation.
    config.saturation = ml_collections.ConfigDict()
    config.saturation.vol_rtol = 1e-4  # vl ~ vv within this is a trivial solution

    # Extended corresponding states.
    config.spung_iters = 20

    return config
