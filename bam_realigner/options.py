import dataclasses
import sys
from pathlib import Path

import yaml

from .ingest import clip_policies

@dataclasses.dataclass(frozen=True)
class RealignerOptions:
    reference_fn: Path = None
    alignment_fn: Path = None
    intervals_fn: Path = None
    window_radius: int = 100
    clip_policy: str = 'drop'
    verbosity: int = 1
    max_procs: int = 1
    gap_char: str = '-'

    def __post_init__(self):
        for field in dataclasses.fields(self):
            value = getattr(self, field.name)
            if field.type == Path and value is not None:
                object.__setattr__(self, field.name, Path(value))

        if self.window_radius < 0:
            raise ValueError(f'window_radius must be non-negative: {self.window_radius}')

        if self.clip_policy not in clip_policies:
            raise ValueError(f'clip_policy must be one of {clip_policies}: {self.clip_policy}')

        if self.max_procs < 1:
            raise ValueError(f'max_procs must be positive: {self.max_procs}')

        if len(self.gap_char) != 1:
            raise ValueError(f'gap_char must be a single character: {self.gap_char!r}')

    @classmethod
    def field_names(cls):
        return tuple(field.name for field in dataclasses.fields(cls))

    @classmethod
    def from_yaml(cls, yaml_fn, **overrides):
        ''' Loads options from a yaml mapping. Non-None overrides (typically
        from the command line) take precedence over values in the file.
        '''
        loaded = yaml.safe_load(Path(yaml_fn).read_text())

        if loaded is None:
            loaded = {}

        if not isinstance(loaded, dict):
            raise ValueError(f'{yaml_fn} does not contain a mapping')

        unknown = set(loaded) - set(cls.field_names())
        if unknown:
            raise ValueError(f'unknown option(s) in {yaml_fn}: {sorted(unknown)}')

        loaded.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**loaded)

    def replace(self, **changes):
        return dataclasses.replace(self, **changes)

    def print(self, fh=sys.stderr):
        fh.write('__OPTIONS____________________________________________________________\n\n')
        for name in self.field_names():
            fh.write(f'{name:<16}{getattr(self, name)}\n')
