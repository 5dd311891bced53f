"""Module to generate model classes from declarative options"""

import copy
import dataclasses
from dataclasses import dataclass, make_dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from absl import logging

from ..params.containers import (
    AssocParam,
    PairParam,
    SingleParam,
    SiteParam,
    paramvals,
    split_groups,
    split_param,
)
from ..params.database import AssocOptions, ParamOptions, getgroups, getparams
from .base import EoSModel, EoSParam

MODEL_REGISTRY: Dict[str, type] = {}
_PARAM_STRUCTS: Dict[Tuple, type] = {}


def _register_subclass(cls, **kwargs):  # pylint: disable=unused-argument
    "Subclasses of created models replace them in the registry."
    MODEL_REGISTRY[cls.__name__] = cls


def identity(x):
    "Identity transformation: the target is the source under a new name."
    return x


@dataclass
class ModelMapping:
    """
    Maps input params (`source`) to model params (`target`).

    `transformation(*sources)` returns one value (or one container) per target.
    With the `identity` transformation the target shares the values array of
    the source.
    """

    source: Union[str, Sequence[str]]
    target: Union[str, Sequence[str]]
    transformation: Callable = identity

    def __post_init__(self):
        if isinstance(self.source, str):
            self.source = [self.source]
        if isinstance(self.target, str):
            self.target = [self.target]
        self.source, self.target = list(self.source), list(self.target)
        if self.transformation is identity and (
            len(self.source) != 1 or len(self.target) != 1
        ):
            raise ValueError(
                f"Identity mapping {self.source} -> {self.target} "
                "must have exactly one source and one target."
            )


@dataclass
class ModelMember:
    """
    A model held by another model (ideal model, alpha function...).

    `default_type` is used when the constructor gets no value for `name`.
    With `separate_namespace`, the member reads its params as
    `{name}__{param}` columns.
    """

    name: str
    default_type: Any
    separate_namespace: bool = False


@dataclass
class ParamField:
    "Name and container type of a parameter field."

    name: str
    type: type
    optional: bool = False


@dataclass
class ModelOptions:
    """
    Declarative description of a model.

    Unset fields are inherited from `parent` (a `ModelOptions` or a class made
    by `createmodel`), otherwise they take their defaults. `params` defaults to
    `inputparams`, `inputparamstype` to `{name}InputParam` and `paramstype` to
    `{name}Param`.
    """

    name: str
    supertype: Optional[type] = None
    parent: Any = None
    members: Optional[List[ModelMember]] = None
    locations: Optional[List[str]] = None
    grouplocations: Optional[List[str]] = None
    inputparams: Optional[List[ParamField]] = None
    params: Optional[List[ParamField]] = None
    mappings: Optional[List[ModelMapping]] = None
    has_params: Optional[bool] = None
    has_components: Optional[bool] = None
    has_sites: Optional[bool] = None
    has_groups: Optional[bool] = None
    param_options: Optional[ParamOptions] = None
    assoc_options: Optional[AssocOptions] = None
    references: Optional[List[str]] = None
    inputparamstype: Optional[str] = None
    paramstype: Optional[str] = None

    def resolve(self) -> "ModelOptions":
        "Fills unset fields from the parent and the defaults, then validates."
        parent = self.parent
        if parent is not None and not isinstance(parent, ModelOptions):
            parent = parent.options
        if parent is not None:
            parent = parent.resolve()

        values = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value is None and parent is not None and f.name not in ("name", "parent"):
                value = getattr(parent, f.name)
            values[f.name] = value

        defaults = {
            "supertype": EoSModel,
            "members": [],
            "locations": [],
            "grouplocations": [],
            "inputparams": [],
            "mappings": [],
            "has_params": bool(values["inputparams"]),
            "has_components": True,
            "has_sites": False,
            "has_groups": False,
            "param_options": ParamOptions(),
            "assoc_options": AssocOptions(),
            "references": [],
            "inputparamstype": f"{self.name}InputParam",
            "paramstype": f"{self.name}Param",
        }
        for key, default in defaults.items():
            if values[key] is None:
                values[key] = default
        if values["params"] is None:
            values["params"] = list(values["inputparams"])
        values["parent"] = None

        resolved = ModelOptions(**values)
        resolved.validate()
        return resolved

    def validate(self):
        "Raises `ValueError` if mappings refer to unknown params."
        inputnames = [f.name for f in self.inputparams]
        paramnames = [f.name for f in self.params]
        for mapping in self.mappings:
            for source in mapping.source:
                if source not in inputnames:
                    raise ValueError(
                        f"{self.name}: mapping source {source} is not an input param."
                    )
            for target in mapping.target:
                if target not in paramnames:
                    raise ValueError(
                        f"{self.name}: mapping target {target} is not a model param."
                    )
        if not issubclass(self.supertype, EoSModel):
            raise ValueError(f"{self.name}: supertype must derive from EoSModel.")


def _param_struct(typename: str, paramfields: List[ParamField]) -> type:
    key = (typename, tuple((f.name, f.type, f.optional) for f in paramfields))
    if key not in _PARAM_STRUCTS:
        _PARAM_STRUCTS[key] = make_dataclass(
            typename,
            [(f.name, Optional[f.type] if f.optional else f.type) for f in paramfields],
            bases=(EoSParam,),
            eq=False,
            namespace={"paramfields": {f.name: f for f in paramfields}},
        )
    return _PARAM_STRUCTS[key]


def _coerce(value, paramfield: ParamField, key: str):
    want = paramfield.type
    if isinstance(value, want):
        if value.name != paramfield.name:
            value = value.copy(paramfield.name, deep=False)
        return value
    if want is PairParam and isinstance(value, SingleParam):
        return PairParam.from_single(value, paramfield.name)
    raise ValueError(
        f"Parameter {key} is a {type(value).__name__}, expected {want.__name__}."
    )


def _empty_param(paramfield: ParamField, components: List[str], sources: list):
    sourcelist = []
    for source in sources:
        if source is not None:
            sourcelist.extend(s for s in source.sources if s not in sourcelist)
    n = len(components)
    if paramfield.type is SingleParam:
        return SingleParam.from_values(
            paramfield.name, components, [0.0] * n, sources=sourcelist
        )
    if paramfield.type is PairParam:
        return PairParam.from_values(
            paramfield.name, components, np.zeros((n, n)), sources=sourcelist
        )
    if paramfield.type is AssocParam:
        template = next(s for s in sources if isinstance(s, AssocParam))
        return template.copy(paramfield.name, deep=True)
    raise ValueError(f"Cannot initialise a parameter of type {paramfield.type}.")


def _build_params(P: type, inputparams, mappings: List[ModelMapping]):
    paramfields = P.paramfields
    identity_targets = {
        m.target[0]: m.source[0] for m in mappings if m.transformation is identity
    }
    mapped = {
        target: m
        for m in mappings
        if m.transformation is not identity
        for target in m.target
    }
    present = [v for v in vars(inputparams).values() if v is not None]
    components = present[0].components if present else []

    values = {}
    for name, paramfield in paramfields.items():
        if name in mapped:
            sources = [getattr(inputparams, s) for s in mapped[name].source]
            values[name] = _empty_param(paramfield, components, sources)
        elif name in identity_targets:
            source = getattr(inputparams, identity_targets[name])
            values[name] = None if source is None else source.copy(name, deep=False)
        elif hasattr(inputparams, name):
            values[name] = getattr(inputparams, name)
        else:
            raise ValueError(f"{P.__name__}: parameter {name} has no input or mapping.")
    params = P(**values)
    _updateparams(inputparams, params, mappings)
    return params


def initparams(
    I: type,  # pylint: disable=invalid-name
    P: type,  # pylint: disable=invalid-name
    rawparams: Dict[str, Any],
    mappings: List[ModelMapping],
    namespace: str = "",
):
    """
    Builds the input params and model params from `getparams` output.

    - Identity mappings: a renamed container sharing the input `values`.
    - Other mappings: new containers, filled by `updateparams`.
    - Unmapped params: the input param object itself.

    Args:
        I: input params dataclass.
        P: model params dataclass.
        rawparams: dict from `getparams`.
        mappings: list of `ModelMapping`.
        namespace: prefix of the csv headers (`{namespace}__{name}`).

    Returns:
        `(inputparams, params)`.
    """
    inputvalues = {}
    for name, paramfield in I.paramfields.items():
        key = f"{namespace}__{name}" if namespace else name
        value = rawparams.get(key)
        if value is None:
            if not paramfield.optional:
                raise ValueError(f"Missing parameter {key} required by {I.__name__}.")
            inputvalues[name] = None
            continue
        inputvalues[name] = _coerce(value, paramfield, key)
    inputparams = I(**inputvalues)
    return inputparams, _build_params(P, inputparams, mappings)


def _updateparams(inputparams, params, mappings: List[ModelMapping]):
    for mapping in mappings:
        if mapping.transformation is identity:
            continue
        outputs = mapping.transformation(
            *[getattr(inputparams, s) for s in mapping.source]
        )
        if not isinstance(outputs, (tuple, list)):
            outputs = [outputs]
        for target, output in zip(mapping.target, outputs):
            toupdate = getattr(params, target)
            if isinstance(toupdate, AssocParam):
                toupdate.values = copy.deepcopy(paramvals(output))
                continue
            toupdate.values[...] = np.asarray(paramvals(output))
            toupdate.ismissingvalues[...] = False


def updateparams(model: EoSModel):
    """
    Recomputes the mapped params of `model` from its current input params.
    Identity mappings share values and need no update.
    """
    _updateparams(model.inputparams, model.params, model.mappings)


def initmodel(member, components, userlocations=(), namespace: str = "", verbose=False):
    "Instantiates a member given as a class, instances are passed through."
    if isinstance(member, type) and issubclass(member, EoSModel):
        if verbose:
            logging.info(f"Creating member model: {member.__name__}")
        return member(
            components, userlocations=userlocations, namespace=namespace, verbose=verbose
        )
    return member


def _make_init(options: ModelOptions) -> Callable:
    def __init__(
        self,
        components=(),
        userlocations=(),
        group_userlocations=(),
        verbose: bool = False,
        namespace: str = "",
        param_options: Optional[ParamOptions] = None,
        assoc_options: Optional[AssocOptions] = None,
        **kwargs,
    ):
        members = {m.name: kwargs.pop(m.name, m.default_type) for m in options.members}
        if kwargs:
            raise TypeError(
                f"{options.name}() got unexpected keyword arguments {sorted(kwargs)}"
            )
        if isinstance(components, str):
            components = [components]
        components = list(components)
        if options.has_components and not components:
            raise ValueError(f"{options.name} requires at least one component.")

        param_options = param_options or options.param_options
        paramcomponents = components
        if options.has_groups:
            self.groups = getgroups(
                components,
                options.grouplocations,
                param_options,
                userlocations=group_userlocations,
                verbose=verbose,
            )
            components = self.groups.components
            paramcomponents = self.groups.flattenedgroups
        self.components = components
        self.references = list(options.references)
        self.mappings = options.mappings

        sites = None
        if options.has_params:
            cls = type(self)
            prefix = f"{namespace}__" if namespace else ""
            names = [prefix + f.name for f in options.inputparams]
            optional = [prefix + f.name for f in options.inputparams if f.optional]
            rawparams, sites = getparams(
                paramcomponents,
                options.locations,
                param_options,
                userlocations=userlocations,
                verbose=verbose,
                return_sites=True,
                selected=names,
                ignore_missing_singleparams=list(
                    param_options.ignore_missing_singleparams
                )
                + optional,
            )
            self.inputparams, self.params = initparams(
                cls.InputParam, cls.Param, rawparams, options.mappings, namespace
            )
        else:
            self.inputparams, self.params = None, None

        if options.has_sites:
            self.sites = sites if sites is not None else SiteParam.empty(components)
            self.assoc_options = assoc_options or options.assoc_options

        for member in options.members:
            setattr(
                self,
                member.name,
                initmodel(
                    members[member.name],
                    components,
                    userlocations=userlocations,
                    namespace=member.name if member.separate_namespace else "",
                    verbose=verbose,
                ),
            )
        self.transform_params()
        if verbose:
            logging.info(f"Created {self!r}")

    return __init__


def _split_member(member, n: int) -> list:
    if member is None:
        return [None] * n
    if isinstance(member, EoSModel):
        return member.split_model()
    return [member] * n


def split_created_model(model: EoSModel) -> list:
    """
    Splits a model made by `createmodel` into one model per component.
    Cross interactions between components are dropped.
    """
    cls = type(model)
    options = cls.options
    n = len(model)
    splitter = model.groups if options.has_groups else None

    inputparts = {}
    if options.has_params:
        for name, value in vars(model.inputparams).items():
            inputparts[name] = [None] * n if value is None else split_param(value, splitter)
    memberparts = {m.name: _split_member(getattr(model, m.name), n) for m in options.members}
    groupparts = split_groups(model.groups) if options.has_groups else None

    models = []
    for i in range(n):
        new = object.__new__(cls)
        new.__dict__.update(model.__dict__)
        new.components = [model.components[i]]
        if groupparts is not None:
            new.groups = groupparts[i]
        if options.has_sites:
            new.sites = SiteParam.from_input(
                [
                    (
                        model.components[i],
                        list(zip(model.sites.sites[i], model.sites.n_sites[i])),
                    )
                ],
                model.sites.sourcecsvs,
            )
        if options.has_params:
            new.inputparams = cls.InputParam(
                **{name: parts[i] for name, parts in inputparts.items()}
            )
            new.params = _build_params(cls.Param, new.inputparams, options.mappings)
        for name, parts in memberparts.items():
            setattr(new, name, parts[i])
        new.transform_params()
        models.append(new)
    return models


def createmodel(options: ModelOptions, verbose: bool = False) -> type:
    """
    Creates a model class from `options`.

    The class derives from `options.supertype`, holds generated dataclasses
    for its input params (`InputParam`) and model params (`Param`), and has a
    constructor `cls(components, userlocations=..., verbose=..., **members)`
    that reads params with `getparams`, builds them with `initparams` and
    instantiates members with `initmodel`.

    Example:
        >>> MyAlpha = createmodel(ModelOptions(
        ...     "MyAlpha",
        ...     supertype=AlphaModel,
        ...     locations=["properties/critical.csv"],
        ...     inputparams=[ParamField("w", SingleParam)],
        ...     params=[ParamField("acentricfactor", SingleParam)],
        ...     mappings=[ModelMapping("w", "acentricfactor")],
        ... ))
    """
    options = options.resolve()
    if verbose:
        logging.info(f"Generating model class {options.name}")
    InputParam = _param_struct(  # pylint: disable=invalid-name
        options.inputparamstype, options.inputparams
    )
    Param = _param_struct(options.paramstype, options.params)  # pylint: disable=invalid-name

    namespace = {
        "__doc__": f"{options.name} model.",
        "__init__": _make_init(options),
        "options": options,
        "InputParam": InputParam,
        "Param": Param,
        "references": list(options.references),
        "has_sites": options.has_sites,
        "has_groups": options.has_groups,
        "__init_subclass__": classmethod(_register_subclass),
    }
    if options.supertype.split_model is EoSModel.split_model:
        namespace["split_model"] = split_created_model
    cls = type(options.name, (options.supertype,), namespace)
    MODEL_REGISTRY[options.name] = cls
    return cls
