#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Load the asset descriptions for a run from a JSON file:
#
#   {
#     "collection": {"name": .., "symbol": .., "description": ..,
#                    "royalty_bps": 100, "image_file": "success.png"},
#     "asset":      { ...same fields... },
#     "update":     { ...same fields... }
#   }
#
# Image paths are relative to the config file. The collection authority is
# not in the file; caller provides the keypair.
#
import os, json
from .model import AssetSpec, CollectionAssetSpec, PublicationConfig

SPEC_FIELDS = [ 'name', 'symbol', 'description', 'royalty_bps', 'image_file' ]

def _spec_args(d, section, base_dir):
    if not isinstance(d, dict):
        raise ValueError(f"Section '{section}' missing or not an object")

    missing = [fn for fn in SPEC_FIELDS if fn not in d]
    if missing:
        raise ValueError(f"Section '{section}' lacks: {', '.join(missing)}")

    extra = set(d) - set(SPEC_FIELDS)
    if extra:
        raise ValueError(f"Section '{section}' has unknown fields: {', '.join(sorted(extra))}")

    args = {fn: d[fn] for fn in SPEC_FIELDS}
    args['image_file'] = os.path.join(base_dir, args['image_file'])

    return args

def parse_config(d, authority, base_dir='.'):
    # dict => PublicationConfig
    if not isinstance(d, dict):
        raise ValueError("Bad config: expecting a JSON object")

    try:
        coll = CollectionAssetSpec(authority=authority,
                                    **_spec_args(d.get('collection'), 'collection', base_dir))
        asset = AssetSpec(**_spec_args(d.get('asset'), 'asset', base_dir))
        update = AssetSpec(**_spec_args(d.get('update'), 'update', base_dir))
    except ValueError as exc:
        raise ValueError(f"Bad config: {exc}")

    return PublicationConfig(collection=coll, asset=asset, update=update)

def load_config(fname, authority):
    with open(fname, 'rt') as fd:
        d = json.load(fd)

    return parse_config(d, authority, os.path.dirname(os.path.abspath(fname)))

# EOF
