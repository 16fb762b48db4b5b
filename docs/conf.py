# Configuration file for the Sphinx documentation builder.
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys

sys.path.insert(0, os.path.abspath("../src"))

# -- Project information -----------------------------------------------------
project = "surface-interp"
author = "surface-interp developers"
copyright = "2025, surface-interp developers"
release = "0.1.0"

# -- General configuration ---------------------------------------------------
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.autosummary",
    "sphinx.ext.mathjax",
    "sphinx.ext.autosectionlabel",
    "sphinx.ext.intersphinx",
    "sphinx_copybutton",
]

templates_path = ["_templates"]
exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]

autosummary_generate = True
autodoc_typehints = "description"
numfig = True

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable/", None),
    "scipy": ("https://docs.scipy.org/doc/scipy/", None),
}

# Don’t warn when the same object is documented multiple times
suppress_warnings = ["autosectionlabel.*", "ref.doc", "ref.python", "duplicate.object"]

# -- Options for HTML output -------------------------------------------------
html_theme = "furo"
html_static_path = []

copybutton_prompt_text = r">>> |\.\.\. "
copybutton_prompt_is_regexp = True

# Titles
html_title = f"{project} documentation"
html_short_title = f"{project}"
