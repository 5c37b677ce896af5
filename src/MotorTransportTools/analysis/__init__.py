from MotorTransportTools.analysis.overlap import (find_nearest_segment,
                                                  segment_overlap,
                                                  all_overlaps, overlap_pairs)
from MotorTransportTools.analysis.vector_field import (VectorField,
                                                       VectorFieldSample,
                                                       tubes_to_vector_field,
                                                       nearest_sample,
                                                       vector_field_mesh)
from MotorTransportTools.analysis.util import (persistence_versus_entropy,
                                               path_length,
                                               mean_squared_displacement,
                                               summarize_results)
