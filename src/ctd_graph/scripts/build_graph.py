#!/usr/bin/env python3
"""
Build a biological-process graph from CTD interaction and vocabulary files.
"""

import logging
import click
from pathlib import Path
from ctd_graph.convert import convert_files
from ctd_graph.graph import GraphBuilder, GraphAnalyzer

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@click.command()
@click.option('-x', '--interaction', 'interaction_file', type=click.Path(exists=True, dir_okay=False),
              help='Structured chemical-gene interactions file (XML, optionally gzipped)')
@click.option('-g', '--gene', 'gene_file', type=click.Path(exists=True, dir_okay=False),
              help='CTD gene vocabulary file (CSV)')
@click.option('-c', '--chemical', 'chemical_file', type=click.Path(exists=True, dir_okay=False),
              help='CTD chemical vocabulary file (CSV)')
@click.option('-o', '--output', required=True, help='Output graph file (base name, no extension)')
@click.option('-t', '--taxonomy', default=None,
              help="Taxonomy id to keep (e.g. 9606), 'defined' or 'undefined'")
@click.option('-r', '--remove-dangling', is_flag=True, help='Remove dangling entity references')
@click.option('--save-format', default='both', type=click.Choice(['graphml', 'pickle', 'both']),
              help='Save format (graphml/pickle/both)')
@click.option('--summary-report', is_flag=True, help='Generate summary report')
def main(interaction_file, gene_file, chemical_file, output, taxonomy, remove_dangling,
         save_format, summary_report):
    """Convert CTD files into a process graph and save it."""

    if not (interaction_file or gene_file or chemical_file):
        raise click.UsageError("Give at least one of --interaction, --gene or --chemical")

    output_path = Path(output)
    output_dir = output_path.parent
    filename = output_path.name
    for suffix in ('.graphml', '.pkl'):
        if filename.endswith(suffix):
            filename = filename[:-len(suffix)]

    logger.info("Starting conversion")

    try:
        store = convert_files(
            interactions=interaction_file,
            genes=gene_file,
            chemicals=chemical_file,
            taxonomy=taxonomy,
            remove_dangling=remove_dangling,
        )

        graph_builder = GraphBuilder(output_dir=output_dir)
        graph = graph_builder.build_graph(store)
        saved = graph_builder.save_graph(graph, filename, format=save_format)

        analyzer = GraphAnalyzer(output_dir=output_dir)
        stats = analyzer.compute_basic_stats(graph)
        logger.info("Graph statistics:")
        for key, value in stats.items():
            logger.info(f"  {key}: {value}")

        if summary_report:
            analyzer.generate_summary_report(graph, output_file=f"{filename}_summary.txt")

        logger.info("Conversion completed successfully!")
        for path in saved:
            logger.info(f"Graph saved to: {path}")

    except Exception as e:
        logger.error(f"Error during conversion: {e}")
        raise click.ClickException(str(e))


if __name__ == '__main__':
    main()
