"""Detection fusion core: geometry, cropping, stitching and detector contracts."""
