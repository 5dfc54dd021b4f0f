def format_info(game, difficulty, depth, score, nodes, elapsed, move, mate_score):
    nps = int(nodes / elapsed) if elapsed > 0 else 0

    if abs(score) >= mate_score:
        score_str = "mate win" if score > 0 else "mate loss"
    else:
        score_str = f"cp {score}"

    return (f"info game {game} level {difficulty} depth {depth} score {score_str} "
            f"nodes {nodes} nps {nps} time {int(elapsed * 1000)} move {move}")
