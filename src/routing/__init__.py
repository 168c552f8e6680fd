"""Declarative controller routing.

Leaf-first:
- **bindings**: Parameter extraction strategies
- **metadata**: The store decorators write route and binding metadata into
- **annotations**: ``route`` and ``bind``, the surface controller authors use
- **discovery**: Finds controllers and turns metadata into route configurations
- **resolver**: Turns a controller class into an instance per request
- **handler**: The per-route endpoint executing a request
- **table**: Registers handlers on a FastAPI router
- **application**: Initialization facade tying the pieces together
"""
