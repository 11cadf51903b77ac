# dnetkit

Building blocks for small convolutional-network training pipelines, built on
NumPy. It is a library: there is no command to run.

## Modules

- `dnetkit.blas`: array kernels that return new NumPy arrays and leave their
  inputs untouched. They cover `reorg`, `flatten`, `shortcut`, `mean`,
  `variance`, `normalize` and `l2normalize`, and the losses `l1`, `l2`,
  `smooth_l1`, `softmax_x_ent` and `logistic_x_ent`, each returning
  `(delta, error)`. The module also has `softmax` and `softmax_batch`,
  `upsample` and `upsample_backward`, `weighted_sum`, `weighted_delta`,
  `inter`, `deinter` and `dot`.
- `dnetkit.box`: `Box`, `DBox` and `Detection`. It computes `box_iou`,
  `box_union`, `box_intersection`, `box_rmse` and the derivatives
  `derivative`, `dintersect`, `dunion` and `diou`. `encode_box` and
  `decode_box` convert boxes relative to an anchor. For non-maximum
  suppression, `do_nms_obj` and `do_nms_sort` reorder and change a list of
  detections in place, and `do_nms` zeroes weaker probabilities in place.
- `dnetkit.matrix`: `make_matrix`, `resize_matrix`, `hold_out_matrix`,
  `pop_column`, `matrix_topk_accuracy`, `csv_to_matrix`, `matrix_to_csv`
  (returns CSV text) and `format_matrix` (returns a boxed text rendering).
- `dnetkit.options`: `OptionList` and `Option`, for key/value lookups. The
  lookups are `find`, `find_str`, `find_int`, `find_float` and their `_quiet`
  variants, and `unused` lists the options that were never looked up.
  `read_data_cfg` reads flat `key=value` files. `read_cfg` reads sectioned
  `[type]` files into a list of `Section`. `get_metadata` returns a
  `Metadata` holding the class count and names. `read_lines` reads a text
  file as a list of lines.
- `dnetkit.tree`: `Tree`, `read_tree`, `parse_tree`, `Tree.change_leaves`,
  `get_hierarchy_probability`, `hierarchy_predictions` and
  `hierarchy_top_prediction`.
- `dnetkit.data`: the `Data` container, which holds an `X` input matrix and a
  `y` target matrix. It also provides `concat_data`, `concat_datas`,
  `scale_data_rows`, `translate_data_rows`, `smooth_data`, `randomize_data`,
  `get_data_part`, `get_random_data`, `split_data`, `get_next_batch`,
  `get_random_batch`, `select_data` and `distance_from_edge`. The random
  functions take an optional `random.Random`.
- `dnetkit.datasets`: label loaders. `get_paths` and `get_labels` read path
  and name lists, and `fill_truth` and `fill_hierarchy` build targets. The
  path loaders are `load_labels_paths`, `load_tags_paths` and
  `load_regression_labels_paths`. The dataset loaders are
  `load_categorical_data_csv`, `load_cifar10_data`, `load_all_cifar10`
  (which takes a list of batch files) and `load_go`.
- `dnetkit.labels`: `BoxLabel`, `read_boxes`, `label_path`, `randomize_boxes`
  and `correct_boxes`. For truth layouts it has `fill_truth_detection`,
  `fill_truth_region` and `fill_truth_swag`. For masks it has `load_rle`,
  `or_image`, `exclusive_image` and `bound_image`.
- `dnetkit.mnist`: `load_mnist_images`, `load_mnist_labels`, `load_mnist`
  and `swap_bytes`. A file with the wrong magic number or truncated contents
  raises `MnistFormatError`.
- `dnetkit.fileio`: `FileBridge`, a context manager that holds one open file
  at a time, opened with an `OpenMode`. It has `open`, `close`, `read` and
  `write`, and `write` flushes after every write.
- `dnetkit.errors`: `EnclaveStatus`, `error_message` and `EnclaveError`.

## Installation

```
pip install .
```

## Examples

Load MNIST and take a batch:

```python
from dnetkit.mnist import load_mnist
from dnetkit.data import get_next_batch

train = load_mnist("train-images-idx3-ubyte", "train-labels-idx1-ubyte")
x, y = get_next_batch(train, 64, 0)
```

Read a network configuration:

```python
from dnetkit.options import read_cfg

for section in read_cfg("mnist.cfg"):
    print(section.type, section.options.find_int_quiet("filters", 0))
```

Suppress overlapping detections:

```python
from dnetkit.box import Box, Detection, do_nms_sort

dets = [
    Detection(bbox=Box(0.5, 0.5, 0.2, 0.2), prob=[0.9], objectness=1.0),
    Detection(bbox=Box(0.51, 0.5, 0.2, 0.2), prob=[0.6], objectness=1.0),
]
do_nms_sort(dets, classes=1, thresh=0.45)
```

## What it does not do

- It does not define, train or run networks.
- It does not decode, encode or augment images.
- It cannot load datasets that need image decoding, such as image-path
  classification, detection or segmentation sets. For those it offers only
  the label-side helpers in `dnetkit.labels` and `dnetkit.datasets`.
- It has no command-line program.

## Running the tests

```
pip install .[test]
pytest
```