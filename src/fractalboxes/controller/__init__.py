"""
The CONTROLLER layer turns abstract input commands into World mutations.
Like the model, it never imports Qt or PyVista.
"""
