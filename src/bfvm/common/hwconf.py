# Machine
TAPE_SIZE = 30000       # Cells on the tape
CELL_MODULUS = 256      # 8-bit cells

# Input channel
INPUT_EOF_FILL = 0      # Stored on every read past the end of input

# Optimizer
MAX_PASSES = 16         # Upper bound on peephole passes per optimize() call
