"""
Gray-Scott Stencil Step

One explicit forward-Euler step of the Gray-Scott model, after Karl
Sims' formulation:

  blur     = 0.2 * (N + S + E + W) + 0.05 * (NE + NW + SE + SW) - center
  reaction = A * B^2
  feed_p   = feed * mask[p]

  A' = A + dt * (Da * blur.A - reaction + feed_p * (1 - A))
  B' = B + dt * (Da/2 * blur.B + reaction - (kill + feed_p) * B)

Neighbours sit diffusion_step cells away (bilinear, toroidal). The
cardinal ring carries 80% of the weight, the diagonals 20%. Nothing is
clamped; display code clamps.

References:
  Pearson, "Complex Patterns in a Simple System" (1993)
  Karl Sims, Reaction-Diffusion Tutorial (karlsims.com/rd.html)
"""

WEIGHT_CARDINAL = 0.2
WEIGHT_DIAGONAL = 0.05
DT = 1.0


def weighted_laplacian(field, step, backend):
    """9-point weighted laplacian of every channel of ``field``."""
    s = float(step)
    sample = backend.sample
    cardinal = (sample(field, -s, 0.0) + sample(field, s, 0.0)
                + sample(field, 0.0, -s) + sample(field, 0.0, s))
    diagonal = (sample(field, -s, -s) + sample(field, -s, s)
                + sample(field, s, -s) + sample(field, s, s))
    return WEIGHT_CARDINAL * cardinal + WEIGHT_DIAGONAL * diagonal - field


def gray_scott_step(read, out, mask, params, backend, dt=DT):
    """Write the successor of ``read`` into ``out``.

    Args:
        read: (2, H, W) committed state, not modified
        out: (2, H, W) target field; must be a different buffer
        mask: (H, W) feed multiplier
        params: StepParams for this iteration
        backend: array backend owning the buffers

    Returns:
        out
    """
    if out is read:
        raise ValueError("stencil step cannot write into the buffer it reads")

    blur = weighted_laplacian(read, params.diffusion_step, backend)
    a = read[0]
    b = read[1]
    reaction = a * b * b
    local_feed = params.feed * mask

    da = params.diffusion_rate * blur[0] - reaction + local_feed * (1.0 - a)
    db = 0.5 * params.diffusion_rate * blur[1] + reaction - (params.kill + local_feed) * b

    backend.copy_into(out[0], a + dt * da)
    backend.copy_into(out[1], b + dt * db)
    return out
