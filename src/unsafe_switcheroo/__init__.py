"""
unsafe-switcheroo Package.

A deterministic rewriter that turns common `unsafe` Rust idioms into their
checked, safe equivalents (e.g. `Vec::with_capacity` + `set_len` into
`vec![0; n]`, raw `ptr::copy` into `copy_within`).

Usage
-----

Simple String Conversion
^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import unsafe_switcheroo as uss
    code = "fn f(v: &mut Vec<i32>) {\\n    unsafe { std::ptr::copy(&v[0], &mut v[3], 3); }\\n}\\n"
    print(uss.convert(code))
    # fn f(v: &mut Vec<i32>) {
    #     v.copy_within(0..3, 3);
    # }

Advanced Usage (Rewrite Engine)
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from unsafe_switcheroo import RewriteEngine, RuntimeConfig

    engine = RewriteEngine(config=RuntimeConfig(validated_unwrap="?"))
    for assist in engine.assists(code, offset=code.index("unsafe")):
        print(assist.label, assist.edit.apply(code))
"""

from typing import Optional

from unsafe_switcheroo.config import RuntimeConfig
from unsafe_switcheroo.core.conversion_result import RewriteResult
from unsafe_switcheroo.core.engine import HoverResult, RewriteEngine

__version__ = "0.1.0"


def convert(code: str, offset: Optional[int] = None, config: Optional[RuntimeConfig] = None) -> str:
  """
  Rewrites the unsafe idioms of a Rust source string.

  Args:
      code (str): The Rust source to convert.
      offset (int, optional): Only convert the unsafe block whose keyword
          touches this byte offset. Converts every block if None.
      config (RuntimeConfig, optional): Engine settings.

  Returns:
      str: The rewritten source.

  Raises:
      ValueError: If the engine reported errors (e.g. no block at `offset`).
  """
  engine = RewriteEngine(config=config)
  result = engine.run(code, offset=offset)

  if result.has_errors:
    error_msg = "\n".join(result.errors)
    raise ValueError(f"Rewrite failed:\n{error_msg}")

  return result.code


__all__ = [
  "HoverResult",
  "RewriteEngine",
  "RewriteResult",
  "RuntimeConfig",
  "convert",
  "__version__",
]
