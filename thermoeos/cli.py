"""Module to compute properties from the command line"""

from typing import Optional, Sequence

import numpy as np
from absl import app, flags, logging
from ml_collections import config_flags

from .methods import crit_pure, saturation_pressure, saturation_temperature, volume
from .models import MODEL_REGISTRY, SPUNG
from .models.activity import bubble_pressure

FLAGS = flags.FLAGS

PROPERTIES = [
    "saturation_pressure",
    "saturation_temperature",
    "crit_pure",
    "volume",
    "bubble_pressure",
]

flags.DEFINE_string("model", "PR", "Model class name, e.g. PR, SRK, NRTL.")
flags.DEFINE_list("components", None, "Comma separated component names.")
flags.DEFINE_enum("property", "saturation_pressure", PROPERTIES, "Property to compute.")
flags.DEFINE_float("temperature", None, "Temperature in K.")
flags.DEFINE_float("pressure", None, "Pressure in Pa.")
flags.DEFINE_list("composition", None, "Comma separated mole amounts.")
flags.DEFINE_list("userlocations", None, "Comma separated extra parameter csv files.")
config_flags.DEFINE_config_file(
    "config",
    None,
    "File path to the solver configuration.",
)


def build_model(name: str, components: Sequence[str], userlocations: Sequence[str] = ()):
    "Instantiates the model class registered as `name`."
    registry = dict(MODEL_REGISTRY, SPUNG=SPUNG)
    if name not in registry:
        raise ValueError(f"Unknown model {name}, available: {sorted(registry)}")
    if name == "SPUNG":
        return SPUNG(list(components))
    return registry[name](list(components), userlocations=list(userlocations))


def _require(value, flagname: str, prop: str):
    if value is None:
        raise ValueError(f"--{flagname} is required for {prop}.")
    return value


def _verbosity(config) -> int:
    "absl verbosity from the optional `verbose` entry of `config`."
    if config is not None and config.get("verbose", False):
        return logging.INFO
    return logging.WARNING


def _solver_kwargs(config) -> dict:
    solver = None if config is None else config.get("solver")
    if solver is None:
        return {}
    return {"atol": solver.atol, "rtol": solver.rtol, "max_iters": solver.max_iters}


def run_property(
    modelname: str,
    components: Sequence[str],
    prop: str,
    temperature: Optional[float] = None,
    pressure: Optional[float] = None,
    composition: Optional[Sequence[float]] = None,
    config=None,
    userlocations: Sequence[str] = (),
) -> dict:
    """
    Computes `prop` with the model `modelname`.

    `config.solver` tolerances, when given, are used by the saturation solvers.

    Returns:
        Dict of the result names and values.
    """
    model = build_model(modelname, components, userlocations)
    z = None if composition is None else np.asarray(composition, dtype=np.float64)
    if prop == "saturation_pressure":
        T = _require(temperature, "temperature", prop)  # pylint: disable=invalid-name
        psat, vl, vv = saturation_pressure(model, T, **_solver_kwargs(config))
        return {"psat": psat, "vl": vl, "vv": vv}
    if prop == "saturation_temperature":
        p = _require(pressure, "pressure", prop)
        tsat, vl, vv = saturation_temperature(model, p, **_solver_kwargs(config))
        return {"Tsat": tsat, "vl": vl, "vv": vv}
    if prop == "crit_pure":
        tc, pc, vc = crit_pure(model)
        return {"Tc": tc, "Pc": pc, "Vc": vc}
    if prop == "volume":
        T = _require(temperature, "temperature", prop)  # pylint: disable=invalid-name
        p = _require(pressure, "pressure", prop)
        return {"V": volume(model, p, T, z)}
    if prop == "bubble_pressure":
        T = _require(temperature, "temperature", prop)  # pylint: disable=invalid-name
        x = _require(composition, "composition", prop)
        p, y = bubble_pressure(model, T, x)
        return {"p": p, "y": [float(v) for v in y]}
    raise ValueError(f"Unknown property {prop}, expected one of {PROPERTIES}")


def main(argv):
    if len(argv) > 1:
        raise app.UsageError("Too many command-line arguments.")
    if not FLAGS.components:
        raise app.UsageError("--components is required.")
    logging.set_verbosity(_verbosity(FLAGS.config))
    composition = (
        None if FLAGS.composition is None else [float(c) for c in FLAGS.composition]
    )
    try:
        result = run_property(
            FLAGS.model,
            FLAGS.components,
            FLAGS.property,
            FLAGS.temperature,
            FLAGS.pressure,
            composition,
            FLAGS.config,
            FLAGS.userlocations or (),
        )
    except ValueError as err:
        raise app.UsageError(str(err)) from err
    for key, value in result.items():
        print(f"{key}: {value}")


def run():
    "Console script entry point."
    app.run(main)


if __name__ == "__main__":
    run()
