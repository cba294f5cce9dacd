"""Static keyword and type tables for the supported shading languages."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shader_formatter.domain.tokens import TypeCategory


class Dialect(Enum):
    HLSL = "hlsl"
    GLSL = "glsl"


@dataclass(frozen=True)
class DialectTables:
    """Everything the lexer and the checker need to know about one dialect."""
    dialect: Dialect
    keywords: frozenset[str]
    types: dict[str, TypeCategory]
    qualifiers: frozenset[str]
    struct_introducers: frozenset[str]
    extensions: frozenset[str]

    def type_category(self, name: str) -> Optional[TypeCategory]:
        return self.types.get(name)


def _numeric_family(
    scalars: dict[str, TypeCategory],
    vector_format: str,
    matrix_format: Optional[str],
) -> dict[str, TypeCategory]:
    """Expand scalar names into their vector and matrix variants."""
    table: dict[str, TypeCategory] = dict(scalars)
    for scalar in scalars:
        if scalar == "void":
            continue
        for n in range(1, 5):
            table[vector_format.format(scalar=scalar, n=n)] = TypeCategory.VECTOR
            if matrix_format is None:
                continue
            for m in range(1, 5):
                table[matrix_format.format(scalar=scalar, n=n, m=m)] = TypeCategory.MATRIX
    return table


_HLSL_SCALARS: dict[str, TypeCategory] = {
    "void": TypeCategory.VOID,
    "bool": TypeCategory.BOOL,
    "int": TypeCategory.INTEGER,
    "uint": TypeCategory.INTEGER,
    "dword": TypeCategory.INTEGER,
    "min16int": TypeCategory.INTEGER,
    "min12int": TypeCategory.INTEGER,
    "min16uint": TypeCategory.INTEGER,
    "int16_t": TypeCategory.INTEGER,
    "uint16_t": TypeCategory.INTEGER,
    "int64_t": TypeCategory.INTEGER,
    "uint64_t": TypeCategory.INTEGER,
    "half": TypeCategory.FLOAT,
    "float": TypeCategory.FLOAT,
    "double": TypeCategory.FLOAT,
    "min16float": TypeCategory.FLOAT,
    "min10float": TypeCategory.FLOAT,
    "float16_t": TypeCategory.FLOAT,
}

_HLSL_TYPES: dict[str, TypeCategory] = {
    **_numeric_family(_HLSL_SCALARS, "{scalar}{n}", "{scalar}{n}x{m}"),
    "vector": TypeCategory.VECTOR,
    "matrix": TypeCategory.MATRIX,
    "SamplerState": TypeCategory.SAMPLER,
    "SamplerComparisonState": TypeCategory.SAMPLER,
    "sampler": TypeCategory.SAMPLER,
    **{
        name: TypeCategory.TEXTURE
        for name in (
            "Texture1D", "Texture1DArray", "Texture2D", "Texture2DArray",
            "Texture2DMS", "Texture2DMSArray", "Texture3D", "TextureCube",
            "TextureCubeArray", "RWTexture1D", "RWTexture1DArray", "RWTexture2D",
            "RWTexture2DArray", "RWTexture3D",
        )
    },
    **{
        name: TypeCategory.BUFFER
        for name in (
            "Buffer", "RWBuffer", "StructuredBuffer", "RWStructuredBuffer",
            "ByteAddressBuffer", "RWByteAddressBuffer", "AppendStructuredBuffer",
            "ConsumeStructuredBuffer", "ConstantBuffer", "RaytracingAccelerationStructure",
        )
    },
}

_HLSL_QUALIFIERS = frozenset(
    {
        "static", "const", "uniform", "extern", "volatile", "shared", "groupshared",
        "inline", "precise", "in", "out", "inout", "nointerpolation",
        "centroid", "noperspective", "row_major", "column_major", "unorm",
        "snorm", "globallycoherent", "export",
    }
)

_HLSL_KEYWORDS = _HLSL_QUALIFIERS | frozenset(
    {
        "struct", "cbuffer", "tbuffer", "return", "if", "else", "for", "while",
        "do", "switch", "case", "default", "break", "continue", "discard",
        "typedef", "register", "packoffset", "true", "false", "namespace",
        "class", "interface", "technique", "technique10", "technique11", "pass",
        "compile", "sizeof",
    }
)

_GLSL_SCALARS: dict[str, TypeCategory] = {
    "void": TypeCategory.VOID,
    "bool": TypeCategory.BOOL,
    "int": TypeCategory.INTEGER,
    "uint": TypeCategory.INTEGER,
    "float": TypeCategory.FLOAT,
    "double": TypeCategory.FLOAT,
}

_GLSL_VECTOR_PREFIXES = ("vec", "ivec", "uvec", "bvec", "dvec")


def _glsl_types() -> dict[str, TypeCategory]:
    table: dict[str, TypeCategory] = dict(_GLSL_SCALARS)
    for name in _GLSL_VECTOR_PREFIXES:
        for n in range(2, 5):
            table[f"{name}{n}"] = TypeCategory.VECTOR
    for prefix in ("mat", "dmat"):
        for n in range(2, 5):
            table[f"{prefix}{n}"] = TypeCategory.MATRIX
            for m in range(2, 5):
                table[f"{prefix}{n}x{m}"] = TypeCategory.MATRIX
    shapes = (
        "1D", "2D", "3D", "Cube", "2DRect", "1DArray", "2DArray", "CubeArray",
        "Buffer", "2DMS", "2DMSArray",
    )
    for sign in ("", "i", "u"):
        for shape in shapes:
            table[f"{sign}sampler{shape}"] = TypeCategory.SAMPLER
            table[f"{sign}texture{shape}"] = TypeCategory.TEXTURE
            table[f"{sign}image{shape}"] = TypeCategory.TEXTURE
    for shadow in ("sampler1DShadow", "sampler2DShadow", "samplerCubeShadow",
                   "sampler2DRectShadow", "sampler1DArrayShadow",
                   "sampler2DArrayShadow", "samplerCubeArrayShadow"):
        table[shadow] = TypeCategory.SAMPLER
    table["sampler"] = TypeCategory.SAMPLER
    table["samplerShadow"] = TypeCategory.SAMPLER
    table["atomic_uint"] = TypeCategory.INTEGER
    return table


_GLSL_QUALIFIERS = frozenset(
    {
        "const", "uniform", "in", "out", "inout", "attribute", "varying",
        "highp", "mediump", "lowp", "flat", "smooth", "noperspective",
        "centroid", "sample", "patch", "invariant", "precise", "coherent",
        "volatile", "restrict", "readonly", "writeonly", "shared",
    }
)

_GLSL_KEYWORDS = _GLSL_QUALIFIERS | frozenset(
    {
        "struct", "buffer", "layout", "return", "if", "else", "for", "while",
        "do", "switch", "case", "default", "break", "continue", "discard",
        "true", "false", "precision", "subroutine",
    }
)

HLSL = DialectTables(
    dialect=Dialect.HLSL,
    keywords=_HLSL_KEYWORDS,
    types=_HLSL_TYPES,
    qualifiers=_HLSL_QUALIFIERS,
    struct_introducers=frozenset({"struct", "cbuffer", "tbuffer"}),
    extensions=frozenset({".hlsl", ".hlsli", ".fx", ".fxh", ".cginc"}),
)

GLSL = DialectTables(
    dialect=Dialect.GLSL,
    keywords=_GLSL_KEYWORDS,
    types=_glsl_types(),
    qualifiers=_GLSL_QUALIFIERS,
    struct_introducers=frozenset({"struct", "uniform", "buffer"}),
    extensions=frozenset(
        {".glsl", ".vert", ".frag", ".geom", ".comp", ".tesc", ".tese", ".vs", ".fs"}
    ),
)

DIALECT_TABLES: dict[Dialect, DialectTables] = {Dialect.HLSL: HLSL, Dialect.GLSL: GLSL}


def tables_for(dialect: Dialect) -> DialectTables:
    return DIALECT_TABLES[dialect]


def dialect_for_extension(suffix: str) -> Optional[Dialect]:
    """Map a file suffix such as ".frag" to its dialect, None when unknown."""
    lowered = suffix.lower()
    for tables in DIALECT_TABLES.values():
        if lowered in tables.extensions:
            return tables.dialect
    return None
